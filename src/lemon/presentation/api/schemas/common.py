"""Common schemas shared across API endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from lemon.presentation.api.schemas.users import UserResponse


class FieldErrorResponse(BaseModel):
    field: str
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response schema (format version 1)."""

    version: int = Field(1, description="Error format version")
    status: int = Field(..., description="HTTP status code")
    error: str = Field(..., description="HTTP reason phrase")
    code: str = Field(..., description="Error code for programmatic handling")
    detail: str = Field(..., description="Error message")
    errors: list[FieldErrorResponse] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "version": 1,
                "status": 404,
                "error": "Not Found",
                "code": "USER_NOT_FOUND",
                "detail": "User not found: 550e8400-e29b-41d4-a716-446655440000",
                "errors": [],
            },
        },
    )


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


class ContextResponse(BaseModel):
    """What a client needs to know before rendering its first page."""

    application_url: str
    recaptcha_site_key: str
    json_prefix_enabled: bool
    user: UserResponse | None = None
