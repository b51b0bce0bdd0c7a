"""Time utilities for the domain layer."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def ensure_tz_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware (UTC if naive).

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``
    columns.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
