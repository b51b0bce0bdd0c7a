"""Authentication services.

Provides password hashing, JWT token management and remember-me cookies.
"""

from lemon_auth.services.jwt_service import JWTService
from lemon_auth.services.password_service import PasswordHashingService
from lemon_auth.services.remember_me_service import (
    REMEMBER_ME_COOKIE,
    REMEMBER_ME_PARAMETER,
    RememberMeService,
)

__all__ = [
    "REMEMBER_ME_COOKIE",
    "REMEMBER_ME_PARAMETER",
    "JWTService",
    "PasswordHashingService",
    "RememberMeService",
]
