"""User domain exceptions.

Custom exceptions for the user domain, used for validation
and business rule violations.
"""

from lemon.domain.shared.exceptions import (
    BusinessRuleViolation,
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidEmailError(ValidationError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCode.INVALID_EMAIL)


class EmailAlreadyExistsError(ConflictError):
    """Email already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            f"Email already registered: {email}",
            ErrorCode.EMAIL_ALREADY_EXISTS,
            {"email": email},
        )


class UserNotFoundError(EntityNotFoundError):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(
            f"User not found: {user_id}",
            ErrorCode.USER_NOT_FOUND,
            {"user_id": user_id},
        )


class AlreadyVerifiedError(BusinessRuleViolation):
    """Verification asked for a user who is already verified."""

    def __init__(self) -> None:
        super().__init__("User is already verified", ErrorCode.ALREADY_VERIFIED)
