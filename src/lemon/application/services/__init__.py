"""Application layer services."""

from lemon.application.services.authentication_service import AuthenticationService
from lemon.application.services.email_change_service import EmailChangeService
from lemon.application.services.password_reset_service import PasswordResetService
from lemon.application.services.user_service import UserService, UserView
from lemon.application.services.verification_service import VerificationService

__all__ = [
    "AuthenticationService",
    "EmailChangeService",
    "PasswordResetService",
    "UserService",
    "UserView",
    "VerificationService",
]
