"""Abstract repository interface for single-use user tokens.

Verification codes, password reset codes and email change codes share one
table; the ``purpose`` column tells them apart. Only SHA-256 hashes of the
codes are stored.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class TokenPurpose(str, Enum):
    """What a single-use token may be redeemed for."""

    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"
    EMAIL_CHANGE = "email_change"


@dataclass(frozen=True)
class UserTokenData:
    """Immutable user token data."""

    id: UUID
    user_id: UUID
    purpose: TokenPurpose
    token_hash: str
    expires_at: datetime
    used_at: datetime | None
    created_at: datetime
    payload: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Check if the token has expired."""
        return now > self.expires_at

    def is_used(self) -> bool:
        """Check if the token has been used."""
        return self.used_at is not None


class UserTokenRepository(ABC):
    """Abstract repository for single-use user tokens."""

    @abstractmethod
    async def create(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        token_hash: str,
        expires_at: datetime,
        payload: str | None = None,
    ) -> UUID:
        """Create a new token.

        Parameters
        ----------
        user_id
            The user's unique identifier
        purpose
            What the token can be redeemed for
        token_hash
            SHA-256 hash of the raw token
        expires_at
            When the token expires
        payload
            Extra data bound to the token (the new address for email changes)

        Returns
        -------
        The token's unique identifier
        """

    @abstractmethod
    async def find_valid_by_hash(
        self,
        purpose: TokenPurpose,
        token_hash: str,
    ) -> UserTokenData | None:
        """Find an unused token of the given purpose by its hash.

        Expiry is left to the caller.
        """

    @abstractmethod
    async def mark_used(self, token_id: UUID) -> None:
        """Mark a token as used."""

    @abstractmethod
    async def invalidate_all_for_user(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
    ) -> None:
        """Invalidate all unused tokens of one purpose for a user."""

    @abstractmethod
    async def count_recent_for_user(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        since: datetime,
    ) -> int:
        """Count tokens created for a user since a given time (for rate limiting)."""

    @abstractmethod
    async def cleanup_expired(self, expired_before: datetime | None = None) -> int:
        """Remove expired tokens.

        Parameters
        ----------
        expired_before
            Only delete tokens that expired before this moment (default now)

        Returns
        -------
        Number of tokens deleted
        """
