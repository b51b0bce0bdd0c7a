"""Authentication schemas for request/response models."""

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)

from lemon.presentation.api.schemas.users import UserResponse

PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"


def _check_retyped(value: str, info: ValidationInfo, field_name: str) -> str:
    # The compared field is missing from info.data when it failed validation
    original = info.data.get(field_name)
    if original is not None and value != original:
        raise ValueError(PASSWORD_MISMATCH_MESSAGE)
    return value


class SignupRequest(BaseModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (8-128 characters)",
    )
    name: str = Field(default="", max_length=255)
    captcha_response: str | None = Field(
        default=None,
        alias="captchaResponse",
        description="reCAPTCHA response token (required when CAPTCHA is enabled)",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "securepassword123",
                "name": "Jane Doe",
                "captchaResponse": "03AGdBq25...",
            },
        },
    )


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: str
    password: str
    remember_me: bool = Field(default=False, alias="rememberMe")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "securepassword123",
                "rememberMe": True,
            },
        },
    )


class RefreshRequest(BaseModel):
    """Request schema for token refresh.

    The refresh_token field is optional - if not provided in the request body,
    the server will read it from the HttpOnly cookie instead.
    """

    refresh_token: str | None = Field(
        default=None,
        description="Refresh token (optional - can also be sent via HttpOnly cookie)",
    )


class ChangePasswordRequest(BaseModel):
    """Request schema for changing a user's password."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)
    retype_password: str

    @field_validator("retype_password")
    @classmethod
    def _passwords_match(cls, v: str, info: ValidationInfo) -> str:
        return _check_retyped(v, info, "new_password")


class ForgotPasswordRequest(BaseModel):
    """Request schema for requesting a password reset email."""

    email: str


class ResetPasswordRequest(BaseModel):
    """Request schema for resetting a password with a mailed code."""

    code: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)
    retype_password: str

    @field_validator("retype_password")
    @classmethod
    def _passwords_match(cls, v: str, info: ValidationInfo) -> str:
        return _check_retyped(v, info, "new_password")


class TokenResponse(BaseModel):
    """Response schema for token data.

    The refresh token is also sent as an HttpOnly cookie.
    """

    access_token: str
    refresh_token: str | None = None
    token_type: str = Field(default="bearer")
    expires_in: int


class AuthResponse(BaseModel):
    """Response schema for authentication (signup/login)."""

    user: UserResponse
    access_token: str
    refresh_token: str | None = None
    token_type: str = Field(default="bearer")
    expires_in: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "email": "user@example.com",
                    "name": "Jane Doe",
                    "roles": ["UNVERIFIED"],
                    "created_at": "2024-12-05T10:30:00Z",
                    "is_verified": False,
                    "is_admin": False,
                },
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 3600,
            },
        },
    )


class MessageResponse(BaseModel):
    message: str
