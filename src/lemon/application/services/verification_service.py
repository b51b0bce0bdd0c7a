"""Email verification for newly registered users."""

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
    AlreadyVerifiedError,
    User,
    UserNotFoundError,
    UserRepository,
)
from lemon.infrastructure.mail import MailSender, send_mail_quietly
from lemon.infrastructure.mail.templates import verification_mail
from lemon_auth import InvalidUserTokenError
from lemon_auth.repositories import TokenPurpose, UserTokenRepository

logger = logging.getLogger(__name__)


class VerificationService:
    """Sends verification codes and redeems them."""

    TOKEN_EXPIRY_HOURS = 24

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        token_repository: UserTokenRepository,
        mail_sender: MailSender,
        permission_evaluator: PermissionEvaluator,
        application_url: str,
        app_name: str = "Lemon",
    ):
        self._user_repo = user_repository
        self._token_repo = token_repository
        self._mail_sender = mail_sender
        self._permission_evaluator = permission_evaluator
        self._application_url = application_url.rstrip("/")
        self._app_name = app_name

    async def send_verification_mail(self, user: User) -> None:
        """Replace any pending code with a new one and mail it to the user."""
        raw_code = generate_code()
        expires_at = utc_now() + timedelta(hours=self.TOKEN_EXPIRY_HOURS)

        await purge_stale_tokens(self._token_repo)
        await self._token_repo.invalidate_all_for_user(
            user.id,
            TokenPurpose.VERIFICATION,
        )
        await self._token_repo.create(
            user.id,
            TokenPurpose.VERIFICATION,
            hash_code(raw_code),
            expires_at,
        )

        link = f"{self._application_url}/users/{user.id}/verification?code={raw_code}"
        mail = verification_mail(user.email, user.name, link, self._app_name)
        if await send_mail_quietly(self._mail_sender, mail):
            logger.info("Verification mail sent to user: %s", user.id)

    async def resend_verification_mail(
        self,
        current_user: User | None,
        user_id: UUID,
    ) -> None:
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        self._permission_evaluator.ensure_permission(current_user, user, EDIT_PERMISSION)

        if not user.is_unverified:
            raise AlreadyVerifiedError

        await self.send_verification_mail(user)

    async def verify_user(self, user_id: UUID, code: str) -> User:
        """Redeem a verification code for ``user_id``."""
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        if not user.is_unverified:
            raise AlreadyVerifiedError

        token = await self._token_repo.find_valid_by_hash(
            TokenPurpose.VERIFICATION,
            hash_code(code),
        )
        if token is None or token.user_id != user.id or token.is_expired(utc_now()):
            raise InvalidUserTokenError

        await self._token_repo.mark_used(token.id)
        user.mark_verified()
        await self._user_repo.save(user)

        logger.info("User verified: %s", user.id)
        return user
