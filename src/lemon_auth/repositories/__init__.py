"""Abstract repository interfaces for authentication data."""

from lemon_auth.repositories.user_credential_repository import (
    UserCredentialData,
    UserCredentialRepository,
)
from lemon_auth.repositories.user_token_repository import (
    TokenPurpose,
    UserTokenData,
    UserTokenRepository,
)

__all__ = [
    "TokenPurpose",
    "UserCredentialData",
    "UserCredentialRepository",
    "UserTokenData",
    "UserTokenRepository",
]
