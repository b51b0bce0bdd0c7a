"""SQLAlchemy model for User aggregate."""

from uuid import UUID

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from lemon.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin


class UserModel(Base, TimestampMixin):
    """SQLAlchemy model for persisting User aggregates.

    Roles are kept as a sorted, comma-separated string; an empty string
    is a verified user without special roles.
    """

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), default="", nullable=False)
    roles: Mapped[str] = mapped_column(String(100), default="", nullable=False)

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, roles={self.roles})>"
