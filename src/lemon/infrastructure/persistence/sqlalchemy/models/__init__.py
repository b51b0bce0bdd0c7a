from lemon.infrastructure.persistence.sqlalchemy.models.base import Base, TimestampMixin
from lemon.infrastructure.persistence.sqlalchemy.models.user_model import UserModel

__all__ = ["Base", "TimestampMixin", "UserModel"]
