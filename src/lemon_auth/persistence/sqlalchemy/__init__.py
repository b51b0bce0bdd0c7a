"""SQLAlchemy implementation for lemon_auth persistence.

Provides:
- AuthBase: Declarative base for auth models
- UserCredentialModel, UserTokenModel: SQLAlchemy models
- UserCredentialRepositorySQLAlchemy, UserTokenRepositorySQLAlchemy:
  Repository implementations

Note: The consuming application must create AuthBase.metadata alongside
its own tables.
"""

from lemon_auth.persistence.sqlalchemy.base import AuthBase
from lemon_auth.persistence.sqlalchemy.models import (
    UserCredentialModel,
    UserTokenModel,
)
from lemon_auth.persistence.sqlalchemy.repositories import (
    UserCredentialRepositorySQLAlchemy,
    UserTokenRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "UserCredentialModel",
    "UserCredentialRepositorySQLAlchemy",
    "UserTokenModel",
    "UserTokenRepositorySQLAlchemy",
]
