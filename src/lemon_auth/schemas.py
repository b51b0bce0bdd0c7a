"""Auth schemas and data structures.

These are simple data classes used for transferring authentication
data between components.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class TokenPayload:
    """Decoded JWT token payload.

    Attributes
    ----------
    user_id
        The unique identifier of the user
    email
        The user's email address
    exp
        Token expiration timestamp
    iat
        Token issue timestamp
    token_type
        Either "access" or "refresh"
    """

    user_id: UUID
    email: str
    exp: datetime
    iat: datetime
    token_type: str  # "access" or "refresh"

    def is_expired(self) -> bool:
        """Check if the token has expired."""
        return datetime.now(tz=self.exp.tzinfo) > self.exp

    def is_access_token(self) -> bool:
        """Check if this is an access token."""
        return self.token_type == "access"

    def is_refresh_token(self) -> bool:
        """Check if this is a refresh token."""
        return self.token_type == "refresh"

    def issued_before(self, moment: datetime | None) -> bool:
        """Check if the token predates ``moment`` (whole-second precision).

        Tokens issued before the user's credentials last changed must no
        longer be honoured.
        """
        if moment is None:
            return False
        return int(self.iat.timestamp()) < int(moment.timestamp())


@dataclass(frozen=True)
class RememberMePayload:
    """Decoded remember-me cookie, before its signature is checked."""

    user_id: UUID
    expires_at: datetime
    signature: str
