"""Pydantic schemas for API request/response models."""

from lemon.presentation.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
)
from lemon.presentation.api.schemas.common import (
    ContextResponse,
    ErrorResponse,
    FieldErrorResponse,
    HealthResponse,
)
from lemon.presentation.api.schemas.users import (
    EmailChangeRequest,
    UpdateUserRequest,
    UserResponse,
)

__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "ContextResponse",
    "EmailChangeRequest",
    "ErrorResponse",
    "FieldErrorResponse",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RefreshRequest",
    "ResetPasswordRequest",
    "SignupRequest",
    "TokenResponse",
    "UpdateUserRequest",
    "UserResponse",
]
