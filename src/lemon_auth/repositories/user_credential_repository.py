"""Abstract repository interface for user credentials.

This interface defines the contract for credential persistence.
Implementations can use SQLAlchemy or any other storage.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserCredentialData:
    """Immutable credential data returned by repository.

    ``credentials_updated_at`` moves whenever the password (or the login
    email) changes; tokens issued before it are no longer honoured.
    """

    user_id: str
    password_hash: str
    failed_login_attempts: int
    locked_until: datetime | None
    last_login_at: datetime | None
    credentials_updated_at: datetime | None = None

    def is_locked(self, now: datetime) -> bool:
        """Check if the lock-out is still running at ``now``."""
        return self.locked_until is not None and self.locked_until > now


class UserCredentialRepository(ABC):
    """
    Abstract repository interface for user authentication credentials.

    Implementations must provide methods for:
    - Saving/updating credentials
    - Finding credentials by user ID
    - Managing failed login attempts and account lockout
    - Tracking last login and credential changes
    """

    # Default lockout settings (can be overridden by implementations)
    MAX_FAILED_ATTEMPTS: int = 5
    LOCKOUT_DURATION_MINUTES: int = 15

    @abstractmethod
    async def save(self, user_id: UUID, password_hash: str) -> UserCredentialData:
        """
        Create or update credentials for a user.

        Updating an existing record also moves ``credentials_updated_at``.

        Parameters
        ----------
        user_id
            The user's unique identifier
        password_hash
            The bcrypt password hash

        Returns
        -------
        The saved credential data
        """

    @abstractmethod
    async def find_by_user_id(self, user_id: UUID) -> UserCredentialData | None:
        """
        Find credentials by user ID.

        Returns
        -------
        Credential data if found, None otherwise
        """

    @abstractmethod
    async def increment_failed_attempts(self, user_id: UUID) -> int:
        """
        Increment failed login attempts for a user.

        Should automatically lock the account if max attempts exceeded.

        Returns
        -------
        The new count of failed attempts
        """

    @abstractmethod
    async def reset_failed_attempts(self, user_id: UUID) -> None:
        """Reset failed login attempts and clear any lockout."""

    @abstractmethod
    async def update_last_login(self, user_id: UUID) -> None:
        """Update last login timestamp after successful authentication."""

    @abstractmethod
    async def touch_credentials(self, user_id: UUID) -> None:
        """Mark the credentials as changed without a new password.

        Used when the login email changes, so that tokens minted for the
        old address stop working.
        """

    @abstractmethod
    async def is_account_locked(self, user_id: UUID) -> tuple[bool, datetime | None]:
        """
        Check if an account is locked.

        Returns
        -------
        Tuple of (is_locked, locked_until) where locked_until is None
        if not locked
        """

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool:
        """
        Delete credentials for a user.

        Returns
        -------
        True if deleted, False if not found
        """
