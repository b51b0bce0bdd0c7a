from lemon_auth.persistence.sqlalchemy.repositories.user_credential_repository import (
    UserCredentialRepositorySQLAlchemy,
)
from lemon_auth.persistence.sqlalchemy.repositories.user_token_repository import (
    UserTokenRepositorySQLAlchemy,
)

__all__ = ["UserCredentialRepositorySQLAlchemy", "UserTokenRepositorySQLAlchemy"]
