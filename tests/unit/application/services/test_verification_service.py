"""Unit tests for VerificationService."""

import re
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from lemon.application.services import VerificationService
from lemon.application.services.user_tokens import hash_code
from lemon.domain.security import PermissionEvaluator
from lemon.domain.shared.exceptions import PermissionDeniedError
from lemon.domain.shared.time import utc_now
from lemon.domain.user import AlreadyVerifiedError, User, UserNotFoundError, UserRole
from lemon.infrastructure.mail import MailData, MailSender, MockMailSender
from lemon_auth import InvalidUserTokenError
from lemon_auth.repositories import TokenPurpose, UserTokenData

CODE_PATTERN = re.compile(r"code=([\w-]+)")


class FailingMailSender(MailSender):
    def send(self, mail: MailData) -> None:
        raise OSError("SMTP server unreachable")


def _token(user_id, code="the-code", expires_in=timedelta(hours=1)) -> UserTokenData:
    now = utc_now()
    return UserTokenData(
        id=uuid4(),
        user_id=user_id,
        purpose=TokenPurpose.VERIFICATION,
        token_hash=hash_code(code),
        expires_at=now + expires_in,
        used_at=None,
        created_at=now,
    )


class TestVerificationService:
    def setup_method(self):
        self.user_repo = AsyncMock()
        self.token_repo = AsyncMock()
        self.mail_sender = MockMailSender()
        self.service = VerificationService(
            user_repository=self.user_repo,
            token_repository=self.token_repo,
            mail_sender=self.mail_sender,
            permission_evaluator=PermissionEvaluator(),
            application_url="https://lemon.example.com/",
            app_name="Lemon",
        )

    @pytest.mark.asyncio
    async def test_send_verification_mail_stores_hash_and_mails_link(self):
        user = User.create("new@example.com", name="Newbie")

        await self.service.send_verification_mail(user)

        self.token_repo.cleanup_expired.assert_awaited_once()
        self.token_repo.invalidate_all_for_user.assert_awaited_once_with(
            user.id,
            TokenPurpose.VERIFICATION,
        )
        args = self.token_repo.create.await_args.args
        assert args[0] == user.id
        assert args[1] == TokenPurpose.VERIFICATION

        assert len(self.mail_sender.sent) == 1
        mail = self.mail_sender.sent[0]
        assert mail.to == "new@example.com"
        assert f"https://lemon.example.com/users/{user.id}/verification?code=" in mail.body
        assert "Hello Newbie" in mail.body

        raw_code = CODE_PATTERN.search(mail.body).group(1)
        assert args[2] == hash_code(raw_code)
        assert raw_code not in args[2]

    @pytest.mark.asyncio
    async def test_mail_failure_does_not_raise(self):
        service = VerificationService(
            user_repository=self.user_repo,
            token_repository=self.token_repo,
            mail_sender=FailingMailSender(),
            permission_evaluator=PermissionEvaluator(),
            application_url="https://lemon.example.com",
        )

        await service.send_verification_mail(User.create("new@example.com"))

        self.token_repo.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verify_user_marks_verified(self):
        user = User.create("new@example.com")
        token = _token(user.id)
        self.user_repo.find_by_id.return_value = user
        self.token_repo.find_valid_by_hash.return_value = token

        verified = await self.service.verify_user(user.id, "the-code")

        assert not verified.is_unverified
        self.token_repo.find_valid_by_hash.assert_awaited_once_with(
            TokenPurpose.VERIFICATION,
            hash_code("the-code"),
        )
        self.token_repo.mark_used.assert_awaited_once_with(token.id)
        self.user_repo.save.assert_awaited_once_with(user)

    @pytest.mark.asyncio
    async def test_verify_rejects_code_of_other_user(self):
        user = User.create("new@example.com")
        self.user_repo.find_by_id.return_value = user
        self.token_repo.find_valid_by_hash.return_value = _token(uuid4())

        with pytest.raises(InvalidUserTokenError):
            await self.service.verify_user(user.id, "the-code")

        self.user_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_rejects_expired_code(self):
        user = User.create("new@example.com")
        self.user_repo.find_by_id.return_value = user
        self.token_repo.find_valid_by_hash.return_value = _token(
            user.id,
            expires_in=timedelta(minutes=-1),
        )

        with pytest.raises(InvalidUserTokenError):
            await self.service.verify_user(user.id, "the-code")

    @pytest.mark.asyncio
    async def test_verify_rejects_unknown_code(self):
        user = User.create("new@example.com")
        self.user_repo.find_by_id.return_value = user
        self.token_repo.find_valid_by_hash.return_value = None

        with pytest.raises(InvalidUserTokenError):
            await self.service.verify_user(user.id, "nope")

    @pytest.mark.asyncio
    async def test_verify_already_verified_user(self):
        user = User.create("new@example.com")
        user.mark_verified()
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(AlreadyVerifiedError):
            await self.service.verify_user(user.id, "the-code")

    @pytest.mark.asyncio
    async def test_verify_unknown_user(self):
        self.user_repo.find_by_id.return_value = None

        with pytest.raises(UserNotFoundError):
            await self.service.verify_user(uuid4(), "the-code")

    @pytest.mark.asyncio
    async def test_resend_by_owner(self):
        user = User.create("new@example.com")
        self.user_repo.find_by_id.return_value = user

        await self.service.resend_verification_mail(user, user.id)

        assert len(self.mail_sender.sent) == 1

    @pytest.mark.asyncio
    async def test_resend_by_stranger_is_denied(self):
        user = User.create("new@example.com")
        stranger = User("stranger@example.com", roles=())
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(PermissionDeniedError):
            await self.service.resend_verification_mail(stranger, user.id)

        assert not self.mail_sender.sent

    @pytest.mark.asyncio
    async def test_resend_by_admin(self):
        user = User.create("new@example.com")
        admin = User("admin@example.com", roles=(UserRole.ADMIN,))
        self.user_repo.find_by_id.return_value = user

        await self.service.resend_verification_mail(admin, user.id)

        assert self.mail_sender.sent[0].to == "new@example.com"

    @pytest.mark.asyncio
    async def test_resend_for_verified_user(self):
        user = User("done@example.com", roles=())
        self.user_repo.find_by_id.return_value = user

        with pytest.raises(AlreadyVerifiedError):
            await self.service.resend_verification_mail(user, user.id)
