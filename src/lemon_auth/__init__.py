"""Lemon Auth - authentication infrastructure.

This package provides authentication infrastructure that is independent
of the user domain. It handles:
- Password hashing (bcrypt)
- JWT token creation and verification with signing key rotation
- Stateless remember-me cookies
- User credential and single-use token storage (pluggable persistence)

Architecture:
    lemon_auth/
    ├── services/           # Pure logic (password hashing, JWT, remember-me)
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   └── sqlalchemy/     # SQLAlchemy implementation
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions
"""

from lemon_auth.exceptions import (
    AccountBlockedError,
    AccountLockedError,
    AuthError,
    InvalidCredentialsError,
    InvalidRememberMeTokenError,
    InvalidTokenError,
    InvalidUserTokenError,
    WeakPasswordError,
)
from lemon_auth.repositories import (
    TokenPurpose,
    UserCredentialRepository,
    UserTokenRepository,
)
from lemon_auth.schemas import RememberMePayload, TokenPayload
from lemon_auth.services import JWTService, PasswordHashingService, RememberMeService

__all__ = [
    # Services
    "PasswordHashingService",
    "JWTService",
    "RememberMeService",
    # Repositories (interfaces)
    "TokenPurpose",
    "UserCredentialRepository",
    "UserTokenRepository",
    # Schemas
    "RememberMePayload",
    "TokenPayload",
    # Exceptions
    "AuthError",
    "InvalidTokenError",
    "InvalidRememberMeTokenError",
    "InvalidUserTokenError",
    "WeakPasswordError",
    "InvalidCredentialsError",
    "AccountLockedError",
    "AccountBlockedError",
]
