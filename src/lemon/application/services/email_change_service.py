"""Two-step email change: request with password, confirm with a mailed code."""

import logging
from datetime import timedelta
from uuid import UUID

from lemon.application.services.user_tokens import (
    generate_code,
    hash_code,
    purge_stale_tokens,
)
from lemon.domain.security import PermissionEvaluator
from lemon.domain.shared.time import utc_now
from lemon.domain.user import (
    EDIT_PERMISSION,
    Email,
    EmailAlreadyExistsError,
    User,
    UserNotFoundError,
    UserRepository,
)
from lemon.infrastructure.mail import MailSender, send_mail_quietly
from lemon.infrastructure.mail.templates import email_change_mail
from lemon_auth import (
    InvalidCredentialsError,
    InvalidUserTokenError,
    PasswordHashingService,
)
from lemon_auth.repositories import (
    TokenPurpose,
    UserCredentialRepository,
    UserTokenRepository,
)

logger = logging.getLogger(__name__)


class EmailChangeService:
    TOKEN_EXPIRY_HOURS = 24

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        token_repository: UserTokenRepository,
        credential_repository: UserCredentialRepository,
        password_service: PasswordHashingService,
        mail_sender: MailSender,
        permission_evaluator: PermissionEvaluator,
        application_url: str,
        app_name: str = "Lemon",
    ):
        self._user_repo = user_repository
        self._token_repo = token_repository
        self._credential_repo = credential_repository
        self._password_service = password_service
        self._mail_sender = mail_sender
        self._permission_evaluator = permission_evaluator
        self._application_url = application_url.rstrip("/")
        self._app_name = app_name

    async def _get_editable_user(self, current_user: User | None, user_id: UUID) -> User:
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        self._permission_evaluator.ensure_permission(current_user, user, EDIT_PERMISSION)
        return user

    async def request_email_change(
        self,
        current_user: User | None,
        user_id: UUID,
        password: str,
        new_email: str,
    ) -> None:
        """Mail a confirmation code to ``new_email``.

        The password is the one of the user whose email changes.
        """
        user = await self._get_editable_user(current_user, user_id)

        credential = await self._credential_repo.find_by_user_id(user.id)
        if credential is None or not self._password_service.verify(
            password,
            credential.password_hash,
        ):
            msg = "Password is incorrect"
            raise InvalidCredentialsError(msg)

        normalized = Email(new_email).value
        if await self._user_repo.exists_by_email(normalized):
            raise EmailAlreadyExistsError(normalized)

        raw_code = generate_code()
        await purge_stale_tokens(self._token_repo)
        await self._token_repo.invalidate_all_for_user(user.id, TokenPurpose.EMAIL_CHANGE)
        await self._token_repo.create(
            user.id,
            TokenPurpose.EMAIL_CHANGE,
            hash_code(raw_code),
            utc_now() + timedelta(hours=self.TOKEN_EXPIRY_HOURS),
            payload=normalized,
        )

        link = f"{self._application_url}/users/{user.id}/email?code={raw_code}"
        mail = email_change_mail(
            normalized,
            user.name,
            link,
            self.TOKEN_EXPIRY_HOURS,
            self._app_name,
        )
        if await send_mail_quietly(self._mail_sender, mail):
            logger.info("Email change code sent for user: %s", user.id)

    async def change_email(
        self,
        current_user: User | None,
        user_id: UUID,
        code: str,
    ) -> User:
        """Apply a requested email change.

        The new address counts as verified. Tokens issued for the old
        address stop working.
        """
        user = await self._get_editable_user(current_user, user_id)

        token = await self._token_repo.find_valid_by_hash(
            TokenPurpose.EMAIL_CHANGE,
            hash_code(code),
        )
        if (
            token is None
            or token.user_id != user.id
            or token.payload is None
            or token.is_expired(utc_now())
        ):
            raise InvalidUserTokenError

        if await self._user_repo.exists_by_email(token.payload):
            raise EmailAlreadyExistsError(token.payload)

        user.change_email(token.payload)
        user.mark_verified()
        await self._user_repo.save(user)
        await self._token_repo.mark_used(token.id)
        await self._credential_repo.touch_credentials(user.id)

        logger.info("Email changed for user: %s", user.id)
        return user
