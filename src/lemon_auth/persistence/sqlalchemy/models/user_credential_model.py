"""SQLAlchemy model for user authentication credentials.

This model stores password hashes and authentication metadata.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lemon.domain.shared.time import ensure_tz_aware, utc_now
from lemon_auth.persistence.sqlalchemy.base import AuthBase


class UserCredentialModel(AuthBase):
    """
    SQLAlchemy model for user authentication credentials.

    This stores password hashes and security metadata separately from
    the main User model. Each user has at most one credential record.

    Security features:
    - failed_login_attempts: Tracks consecutive failed logins
    - locked_until: Account lockout timestamp
    - credentials_updated_at: Tokens issued earlier are rejected

    Table: user_credentials
    """

    __tablename__ = "user_credentials"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # No FK to stay decoupled from the users table
    user_id: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        index=True,
    )

    # bcrypt format, ~60 chars
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )
    credentials_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<UserCredentialModel(id={self.id}, user_id={self.user_id})>"

    def is_locked(self) -> bool:
        """Check if the account is currently locked."""
        locked_until = ensure_tz_aware(self.locked_until)
        if locked_until is None:
            return False
        return utc_now() < locked_until
