"""User schemas for request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from lemon.application.services import UserView
from lemon.domain.user import User, UserRole


class UserResponse(BaseModel):
    """A user; ``email`` is null when the viewer may not see it."""

    id: UUID
    email: str | None
    name: str
    roles: list[str]
    created_at: datetime
    is_verified: bool
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls._build(user, user.email)

    @classmethod
    def from_view(cls, view: UserView) -> "UserResponse":
        return cls._build(view, view.email)

    @classmethod
    def _build(cls, source: User | UserView, email: str | None) -> "UserResponse":
        roles = source.roles
        return cls(
            id=source.id,
            email=email,
            name=source.name,
            roles=sorted(role.value for role in roles),
            created_at=source.created_at,
            is_verified=UserRole.UNVERIFIED not in roles,
            is_admin=UserRole.ADMIN in roles,
        )


class UpdateUserRequest(BaseModel):
    """Fields left out stay unchanged."""

    name: str | None = Field(default=None, max_length=255)
    roles: list[UserRole] | None = Field(
        default=None,
        description="Only applied when a verified admin edits another user",
    )


class EmailChangeRequest(BaseModel):
    password: str
    new_email: EmailStr = Field(..., alias="newEmail")

    model_config = ConfigDict(populate_by_name=True)
