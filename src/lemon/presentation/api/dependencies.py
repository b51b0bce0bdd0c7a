"""FastAPI dependency injection for the Lemon API.

Provides dependencies for:
- Database sessions
- Authentication (current user from bearer token or remember-me cookie)
- Replaceable default components (mail sender, password hasher, CAPTCHA
  validator, permission evaluator)
- Service instances

Every default can be swapped by the embedding application through
``app.dependency_overrides``.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated, AsyncGenerator

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lemon.application.services import (
    AuthenticationService,
    EmailChangeService,
    PasswordResetService,
    UserService,
    VerificationService,
)
from lemon.domain.security import PermissionEvaluator
from lemon.domain.user import User
from lemon.infrastructure.captcha import CaptchaValidator
from lemon.infrastructure.mail import MailSender
from lemon.infrastructure.persistence.sqlalchemy import UserRepositorySQLAlchemy
from lemon.presentation.api.security import AuthenticationFailureHandler
from lemon_auth import (
    AuthError,
    JWTService,
    PasswordHashingService,
    RememberMeService,
)
from lemon_auth.persistence.sqlalchemy import (
    UserCredentialRepositorySQLAlchemy,
    UserTokenRepositorySQLAlchemy,
)
from lemon_auth.services import REMEMBER_ME_COOKIE
from lemon_config.settings import Settings

logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)


def get_api_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_api_settings)]


# -----------------------------------------------------------------------------
# Database Engine & Session (one per application)
# -----------------------------------------------------------------------------


def create_db_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async database engine for ``settings.database_url``.

    Returns
    -------
    AsyncEngine instance
    """
    url = settings.database_url

    # Ensure data directory exists for SQLite files
    if url.startswith("sqlite") and ":memory:" not in url:
        db_path = url.split("///")[-1]
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(url, echo=False, pool_pre_ping=True)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the running application's engine."""
    return request.app.state.session_maker


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Uncommitted work is rolled back when the session closes.

    Yields
    ------
    AsyncSession for database operations
    """
    async with get_session_maker(request)() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


# -----------------------------------------------------------------------------
# Replaceable default components
# -----------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _default_password_service() -> PasswordHashingService:
    logger.info("Configuring PasswordHashingService")
    return PasswordHashingService()


def get_password_service() -> PasswordHashingService:
    """Get password hashing service (bcrypt)."""
    return _default_password_service()


def create_jwt_service(settings: Settings) -> JWTService:
    logger.info("Configuring JWTService")
    return JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
        refresh_token_expire_days=settings.jwt_refresh_token_expire_days,
        previous_secret_keys=settings.jwt_verification_keys[1:],
    )


def create_remember_me_service(settings: Settings) -> RememberMeService:
    logger.info("Configuring RememberMeService")
    return RememberMeService(
        key=settings.remember_me_key.get_secret_value(),
        previous_keys=settings.remember_me_verification_keys[1:],
        validity_seconds=settings.remember_me_validity_seconds,
    )


def create_captcha_validator(settings: Settings) -> CaptchaValidator:
    logger.info("Configuring CaptchaValidator")
    secret = settings.recaptcha_secret_key
    return CaptchaValidator(
        secret_key=secret.get_secret_value() if secret else None,
        verify_url=settings.recaptcha_verify_url,
        timeout=settings.recaptcha_timeout,
    )


def create_permission_evaluator() -> PermissionEvaluator:
    logger.info("Configuring PermissionEvaluator")
    return PermissionEvaluator()


def get_jwt_service(request: Request) -> JWTService:
    """JWT service configured with the application's settings."""
    return request.app.state.jwt_service


def get_remember_me_service(request: Request) -> RememberMeService:
    return request.app.state.remember_me_service


def get_mail_sender(request: Request) -> MailSender:
    """Mail sender chosen at startup (SMTP or mock)."""
    return request.app.state.mail_sender


def get_captcha_validator(request: Request) -> CaptchaValidator:
    return request.app.state.captcha_validator


def get_permission_evaluator(request: Request) -> PermissionEvaluator:
    return request.app.state.permission_evaluator


PasswordServiceDep = Annotated[PasswordHashingService, Depends(get_password_service)]
MailSenderDep = Annotated[MailSender, Depends(get_mail_sender)]
CaptchaValidatorDep = Annotated[CaptchaValidator, Depends(get_captcha_validator)]
PermissionEvaluatorDep = Annotated[PermissionEvaluator, Depends(get_permission_evaluator)]


# -----------------------------------------------------------------------------
# Application Services
# -----------------------------------------------------------------------------


async def get_authentication_service(
    session: DBSession,
    password_service: PasswordServiceDep,
    jwt_service: JWTService = Depends(get_jwt_service),
    remember_me_service: RememberMeService = Depends(get_remember_me_service),
) -> AuthenticationService:
    """
    Get authentication service with all dependencies.

    This service orchestrates user registration, login, and token management.
    """
    return AuthenticationService(
        user_repository=UserRepositorySQLAlchemy(session),
        credential_repository=UserCredentialRepositorySQLAlchemy(session),
        password_service=password_service,
        jwt_service=jwt_service,
        remember_me_service=remember_me_service,
    )


AuthService = Annotated[AuthenticationService, Depends(get_authentication_service)]


async def get_verification_service(
    session: DBSession,
    settings: SettingsDep,
    mail_sender: MailSenderDep,
    permission_evaluator: PermissionEvaluatorDep,
) -> VerificationService:
    return VerificationService(
        user_repository=UserRepositorySQLAlchemy(session),
        token_repository=UserTokenRepositorySQLAlchemy(session),
        mail_sender=mail_sender,
        permission_evaluator=permission_evaluator,
        application_url=settings.application_url,
        app_name=settings.app_name,
    )


async def get_password_reset_service(
    session: DBSession,
    settings: SettingsDep,
    password_service: PasswordServiceDep,
    mail_sender: MailSenderDep,
) -> PasswordResetService:
    return PasswordResetService(
        user_repository=UserRepositorySQLAlchemy(session),
        token_repository=UserTokenRepositorySQLAlchemy(session),
        credential_repository=UserCredentialRepositorySQLAlchemy(session),
        password_service=password_service,
        mail_sender=mail_sender,
        application_url=settings.application_url,
        app_name=settings.app_name,
    )


async def get_email_change_service(  # noqa: PLR0913
    session: DBSession,
    settings: SettingsDep,
    password_service: PasswordServiceDep,
    mail_sender: MailSenderDep,
    permission_evaluator: PermissionEvaluatorDep,
) -> EmailChangeService:
    return EmailChangeService(
        user_repository=UserRepositorySQLAlchemy(session),
        token_repository=UserTokenRepositorySQLAlchemy(session),
        credential_repository=UserCredentialRepositorySQLAlchemy(session),
        password_service=password_service,
        mail_sender=mail_sender,
        permission_evaluator=permission_evaluator,
        application_url=settings.application_url,
        app_name=settings.app_name,
    )


async def get_user_service(
    session: DBSession,
    password_service: PasswordServiceDep,
    permission_evaluator: PermissionEvaluatorDep,
) -> UserService:
    return UserService(
        user_repository=UserRepositorySQLAlchemy(session),
        credential_repository=UserCredentialRepositorySQLAlchemy(session),
        password_service=password_service,
        permission_evaluator=permission_evaluator,
    )


VerificationServiceDep = Annotated[VerificationService, Depends(get_verification_service)]
PasswordResetServiceDep = Annotated[
    PasswordResetService,
    Depends(get_password_reset_service),
]
EmailChangeServiceDep = Annotated[EmailChangeService, Depends(get_email_change_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


# -----------------------------------------------------------------------------
# Current User (bearer token first, remember-me cookie second)
# -----------------------------------------------------------------------------


async def get_current_user_optional(
    auth_service: AuthService,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    remember_me: Annotated[str | None, Cookie(alias=REMEMBER_ME_COOKIE)] = None,
) -> User | None:
    """
    Resolve the current user, or None for anonymous requests.

    A bearer token that is present but invalid is an error; an unusable
    remember-me cookie only makes the request anonymous.
    """
    if credentials is not None:
        return await auth_service.authenticate_access_token(credentials.credentials)

    if remember_me:
        try:
            return await auth_service.remember_me_login(remember_me)
        except AuthError as e:
            logger.info("Ignoring remember-me cookie: %s", e)

    return None


OptionalCurrentUser = Annotated[User | None, Depends(get_current_user_optional)]


async def get_current_user(user: OptionalCurrentUser) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Raises
    ------
    HTTPException
        401 if neither a valid token nor a valid remember-me cookie is sent
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    """Require a verified, unblocked admin."""
    if not user.is_good_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


AdminUser = Annotated[User, Depends(require_admin)]


def get_auth_failure_handler(request: Request) -> AuthenticationFailureHandler:
    return request.app.state.auth_failure_handler


__all__ = [
    "AdminUser",
    "AuthService",
    "CaptchaValidatorDep",
    "CurrentUser",
    "DBSession",
    "EmailChangeServiceDep",
    "MailSenderDep",
    "OptionalCurrentUser",
    "PasswordResetServiceDep",
    "SettingsDep",
    "UserServiceDep",
    "VerificationServiceDep",
    "create_captcha_validator",
    "create_db_engine",
    "create_jwt_service",
    "create_permission_evaluator",
    "create_remember_me_service",
    "create_session_maker",
    "get_api_settings",
    "get_authentication_service",
    "get_auth_failure_handler",
    "get_captcha_validator",
    "get_current_user",
    "get_current_user_optional",
    "get_db_session",
    "get_email_change_service",
    "get_jwt_service",
    "get_mail_sender",
    "get_password_reset_service",
    "get_password_service",
    "get_permission_evaluator",
    "get_remember_me_service",
    "get_session_maker",
    "get_user_service",
    "get_verification_service",
]
