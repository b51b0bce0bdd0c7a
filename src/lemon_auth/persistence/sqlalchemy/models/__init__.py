from lemon_auth.persistence.sqlalchemy.models.user_credential_model import (
    UserCredentialModel,
)
from lemon_auth.persistence.sqlalchemy.models.user_token_model import UserTokenModel

__all__ = ["UserCredentialModel", "UserTokenModel"]
