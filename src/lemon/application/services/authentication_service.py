"""Authentication service for user registration and login."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from lemon.domain.shared.time import utc_now
from lemon.domain.user import EmailAlreadyExistsError, InvalidEmailError, User
from lemon_auth import (
    AccountBlockedError,
    AccountLockedError,
    InvalidCredentialsError,
    InvalidRememberMeTokenError,
    InvalidTokenError,
    JWTService,
    PasswordHashingService,
    RememberMeService,
    TokenPayload,
)
from lemon_auth.repositories import UserCredentialRepository

if TYPE_CHECKING:
    from lemon.domain.user import UserRepository

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates lemon_auth infrastructure (password hashing, JWT tokens,
    remember-me cookies) with the User domain to provide:
    - User registration
    - Login with password, failing uniformly
    - Remember-me login
    - Token refresh and request authentication
    - Password change
    """

    def __init__(
        self,
        user_repository: UserRepository,
        credential_repository: UserCredentialRepository,
        password_service: PasswordHashingService,
        jwt_service: JWTService,
        remember_me_service: RememberMeService | None = None,
    ):
        self._user_repo = user_repository
        self._credential_repo = credential_repository
        self._password_service = password_service
        self._jwt_service = jwt_service
        self._remember_me_service = remember_me_service

    def create_token_pair(self, user: User) -> tuple[str, str]:
        access_token = self._jwt_service.create_access_token(
            user_id=user.id,
            email=user.email,
        )
        refresh_token = self._jwt_service.create_refresh_token(
            user_id=user.id,
            email=user.email,
        )
        return access_token, refresh_token

    async def register(
        self,
        email: str,
        password: str,
        name: str = "",
    ) -> tuple[User, str, str]:
        existing_user = await self._user_repo.find_by_email(email)
        if existing_user is not None:
            raise EmailAlreadyExistsError(email)

        password_hash = self._password_service.hash(password)
        user = User.create(email, name=name)

        # First user becomes admin
        if await self._user_repo.count() == 0:
            user.promote_to_admin()

        await self._user_repo.save(user)
        await self._credential_repo.save(user_id=user.id, password_hash=password_hash)

        access_token, refresh_token = self.create_token_pair(user)

        logger.info(
            "User registered: %s (roles: %s)",
            user.email,
            ",".join(sorted(r.value for r in user.roles)),
        )
        return user, access_token, refresh_token

    async def login(
        self,
        email: str,
        password: str,
    ) -> tuple[User, str, str]:
        """Check email and password.

        Unknown emails and wrong passwords fail the same way, after the
        same amount of bcrypt work. Lock-out and blocking are only
        reported to callers who know the password.
        """
        try:
            user = await self._user_repo.find_by_email(email)
        except InvalidEmailError:
            user = None

        credential = (
            await self._credential_repo.find_by_user_id(user.id) if user else None
        )
        if user is None or credential is None:
            self._password_service.dummy_verify(password)
            raise InvalidCredentialsError

        if not self._password_service.verify(password, credential.password_hash):
            await self._credential_repo.increment_failed_attempts(user.id)
            raise InvalidCredentialsError

        if credential.is_locked(utc_now()):
            locked_until = credential.locked_until
            raise AccountLockedError(
                locked_until=locked_until.isoformat() if locked_until else None,
            )

        if user.is_blocked:
            logger.warning("Blocked user tried to log in: %s", user.id)
            raise AccountBlockedError

        await self._credential_repo.reset_failed_attempts(user.id)
        await self._credential_repo.update_last_login(user.id)

        access_token, refresh_token = self.create_token_pair(user)

        logger.info("User logged in: %s", user.email)
        return user, access_token, refresh_token

    async def issue_remember_me_token(self, user: User) -> str:
        """Create a remember-me cookie value bound to the current password."""
        if self._remember_me_service is None:
            msg = "Remember-me is not configured"
            raise InvalidRememberMeTokenError(msg)

        credential = await self._credential_repo.find_by_user_id(user.id)
        if credential is None:
            msg = "User credentials not found"
            raise InvalidCredentialsError(msg)

        return self._remember_me_service.create_token(user.id, credential.password_hash)

    async def remember_me_login(self, cookie_value: str) -> User:
        """Resolve the user behind a remember-me cookie.

        Raises
        ------
        InvalidRememberMeTokenError
            If the cookie is malformed, expired, forged or outdated
        AccountBlockedError
            If the user has been blocked since the cookie was issued
        """
        if self._remember_me_service is None:
            msg = "Remember-me is not configured"
            raise InvalidRememberMeTokenError(msg)

        payload = self._remember_me_service.decode(cookie_value)

        user = await self._user_repo.find_by_id(payload.user_id)
        credential = await self._credential_repo.find_by_user_id(payload.user_id)
        if user is None or credential is None:
            msg = "Remember-me cookie refers to an unknown user"
            raise InvalidRememberMeTokenError(msg)

        self._remember_me_service.verify(payload, credential.password_hash)

        if user.is_blocked:
            raise AccountBlockedError

        logger.debug("Remember-me login for user: %s", user.id)
        return user

    async def refresh_token(self, refresh_token: str) -> tuple[str, str]:
        payload = self._jwt_service.verify_token(refresh_token)

        if not payload.is_refresh_token():
            msg = "Not a refresh token"
            raise InvalidTokenError(msg)

        user = await self._load_token_user(payload)

        new_access_token, new_refresh_token = self.create_token_pair(user)

        logger.debug("Tokens refreshed for user: %s", user.email)
        return new_access_token, new_refresh_token

    async def authenticate_access_token(self, token: str) -> User:
        """Resolve the user an access token was issued to."""
        payload = self._jwt_service.verify_token(token)

        # Refresh tokens are only good at the refresh endpoint
        if not payload.is_access_token():
            msg = "Invalid token type"
            raise InvalidTokenError(msg)

        user = await self._load_token_user(payload)
        if user.is_blocked:
            raise AccountBlockedError
        return user

    async def change_password(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
    ) -> None:
        credential = await self._credential_repo.find_by_user_id(user_id)
        if credential is None:
            msg = "User credentials not found"
            raise InvalidCredentialsError(msg)
        if not self._password_service.verify(
            current_password,
            credential.password_hash,
        ):
            msg = "Current password is incorrect"
            raise InvalidCredentialsError(msg)

        new_hash = self._password_service.hash(new_password)
        await self._credential_repo.save(user_id=user_id, password_hash=new_hash)

        logger.info("Password changed for user: %s", user_id)

    async def _load_token_user(self, payload: TokenPayload) -> User:
        user = await self._user_repo.find_by_id(payload.user_id)
        if user is None:
            msg = "User not found"
            raise InvalidTokenError(msg)

        credential = await self._credential_repo.find_by_user_id(user.id)
        if credential is not None and payload.issued_before(
            credential.credentials_updated_at,
        ):
            msg = "Token was issued before the credentials changed"
            raise InvalidTokenError(msg)

        return user
