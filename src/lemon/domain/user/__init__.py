"""User domain: identity, roles and the user repository contract."""

from lemon.domain.user.aggregates import EDIT_PERMISSION, User
from lemon.domain.user.exceptions import (
    AlreadyVerifiedError,
    EmailAlreadyExistsError,
    InvalidEmailError,
    UserNotFoundError,
)
from lemon.domain.user.repositories import UserRepository
from lemon.domain.user.value_objects import Email, UserRole

__all__ = [
    "EDIT_PERMISSION",
    "AlreadyVerifiedError",
    "Email",
    "EmailAlreadyExistsError",
    "InvalidEmailError",
    "User",
    "UserNotFoundError",
    "UserRepository",
    "UserRole",
]
