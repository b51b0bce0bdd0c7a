import logging
from datetime import timedelta

from lemon.application.services.user_tokens import (
    generate_code,
    hash_code,
    purge_stale_tokens,
)
from lemon.domain.shared.time import utc_now
from lemon.domain.user import InvalidEmailError, UserRepository
from lemon.infrastructure.mail import MailSender, send_mail_quietly
from lemon.infrastructure.mail.templates import password_reset_mail
from lemon_auth import InvalidUserTokenError, PasswordHashingService
from lemon_auth.repositories import (
    TokenPurpose,
    UserCredentialRepository,
    UserTokenRepository,
)

logger = logging.getLogger(__name__)


class PasswordResetService:
    """Service for handling password reset requests and token validation."""

    MAX_RESETS_PER_DAY = 3
    TOKEN_EXPIRY_HOURS = 1

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        token_repository: UserTokenRepository,
        credential_repository: UserCredentialRepository,
        password_service: PasswordHashingService,
        mail_sender: MailSender,
        application_url: str,
        app_name: str = "Lemon",
    ):
        self._user_repo = user_repository
        self._token_repo = token_repository
        self._credential_repo = credential_repository
        self._password_service = password_service
        self._mail_sender = mail_sender
        self._application_url = application_url.rstrip("/")
        self._app_name = app_name

    async def request_reset(self, email: str) -> None:
        try:
            user = await self._user_repo.find_by_email(email)
        except InvalidEmailError:
            user = None
        if not user:
            # Silent fail to prevent email enumeration
            logger.debug("Password reset requested for unknown email")
            return

        since = utc_now() - timedelta(days=1)
        count = await self._token_repo.count_recent_for_user(
            user.id,
            TokenPurpose.PASSWORD_RESET,
            since,
        )
        if count >= self.MAX_RESETS_PER_DAY:
            logger.warning("Rate limit exceeded for password reset: %s", user.id)
            # Still silent fail for security
            return

        raw_code = generate_code()
        expires_at = utc_now() + timedelta(hours=self.TOKEN_EXPIRY_HOURS)

        await purge_stale_tokens(self._token_repo)

        # Invalidate old tokens and create new one
        await self._token_repo.invalidate_all_for_user(
            user.id,
            TokenPurpose.PASSWORD_RESET,
        )
        await self._token_repo.create(
            user.id,
            TokenPurpose.PASSWORD_RESET,
            hash_code(raw_code),
            expires_at,
        )

        link = f"{self._application_url}/reset-password?code={raw_code}"
        mail = password_reset_mail(
            user.email,
            link,
            self.TOKEN_EXPIRY_HOURS,
            self._app_name,
        )
        # Don't raise on mail failure - the token already exists
        if await send_mail_quietly(self._mail_sender, mail):
            logger.info("Password reset mail sent to user: %s", user.id)

    async def reset_password(self, code: str, new_password: str) -> None:
        reset_token = await self._token_repo.find_valid_by_hash(
            TokenPurpose.PASSWORD_RESET,
            hash_code(code),
        )

        if not reset_token or reset_token.is_used():
            raise InvalidUserTokenError

        if reset_token.is_expired(utc_now()):
            raise InvalidUserTokenError

        new_hash = self._password_service.hash(new_password)
        await self._credential_repo.save(
            user_id=reset_token.user_id,
            password_hash=new_hash,
        )
        # A successful reset also lifts a lock-out
        await self._credential_repo.reset_failed_attempts(reset_token.user_id)

        await self._token_repo.mark_used(reset_token.id)
        logger.info("Password reset completed for user: %s", reset_token.user_id)
