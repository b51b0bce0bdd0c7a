"""SQLAlchemy persistence for the user domain."""

from lemon.infrastructure.persistence.sqlalchemy.models import Base, UserModel
from lemon.infrastructure.persistence.sqlalchemy.repositories import (
    UserRepositorySQLAlchemy,
)

__all__ = ["Base", "UserModel", "UserRepositorySQLAlchemy"]
