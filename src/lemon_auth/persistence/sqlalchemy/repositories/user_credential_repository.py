"""SQLAlchemy implementation of UserCredentialRepository.

Provides data access for UserCredentialModel with security-focused
operations like account lockout management.
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lemon.domain.shared.time import ensure_tz_aware, utc_now
from lemon_auth.persistence.sqlalchemy.models import UserCredentialModel
from lemon_auth.repositories import UserCredentialData, UserCredentialRepository

logger = logging.getLogger(__name__)


class UserCredentialRepositorySQLAlchemy(UserCredentialRepository):
    """
    SQLAlchemy implementation of UserCredentialRepository.

    Provides CRUD operations plus security-specific methods for
    account lockout management using SQLAlchemy as the ORM.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_data(self, model: UserCredentialModel) -> UserCredentialData:
        """Map SQLAlchemy model to data transfer object."""
        return UserCredentialData(
            user_id=model.user_id,
            password_hash=model.password_hash,
            failed_login_attempts=model.failed_login_attempts,
            locked_until=ensure_tz_aware(model.locked_until),
            last_login_at=ensure_tz_aware(model.last_login_at),
            credentials_updated_at=ensure_tz_aware(model.credentials_updated_at),
        )

    async def _find_model_by_user_id(self, user_id: UUID) -> UserCredentialModel | None:
        stmt = select(UserCredentialModel).where(
            UserCredentialModel.user_id == str(user_id),
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def save(
        self,
        user_id: UUID,
        password_hash: str,
    ) -> UserCredentialData:
        existing = await self._find_model_by_user_id(user_id)

        if existing:
            now = utc_now()
            existing.password_hash = password_hash
            existing.updated_at = now
            existing.credentials_updated_at = now
            logger.debug("Updated credentials for user: %s", user_id)
            await self._session.flush()
            return self._to_data(existing)

        now = utc_now()
        model = UserCredentialModel(
            user_id=str(user_id),
            password_hash=password_hash,
            failed_login_attempts=0,
            created_at=now,
            updated_at=now,
            credentials_updated_at=now,
        )
        self._session.add(model)
        await self._session.flush()
        logger.info("Created credentials for user: %s", user_id)
        return self._to_data(model)

    async def find_by_user_id(self, user_id: UUID) -> UserCredentialData | None:
        model = await self._find_model_by_user_id(user_id)
        return self._to_data(model) if model else None

    async def increment_failed_attempts(self, user_id: UUID) -> int:
        credential = await self._find_model_by_user_id(user_id)
        if not credential:
            return 0

        now = utc_now()
        locked_until = ensure_tz_aware(credential.locked_until)
        if locked_until is not None:
            if locked_until > now:
                # A running lock is never extended
                return credential.failed_login_attempts
            # Expired lock: counting starts over
            credential.failed_login_attempts = 0
            credential.locked_until = None

        credential.failed_login_attempts += 1
        credential.updated_at = now

        # Lock account if too many failed attempts
        if credential.failed_login_attempts >= self.MAX_FAILED_ATTEMPTS:
            credential.locked_until = now + timedelta(
                minutes=self.LOCKOUT_DURATION_MINUTES,
            )
            logger.warning(
                "Account locked for user %s due to %d failed attempts",
                user_id,
                credential.failed_login_attempts,
            )

        await self._session.flush()
        return credential.failed_login_attempts

    async def reset_failed_attempts(self, user_id: UUID) -> None:
        credential = await self._find_model_by_user_id(user_id)
        if credential:
            credential.failed_login_attempts = 0
            credential.locked_until = None
            credential.updated_at = utc_now()
            await self._session.flush()

    async def update_last_login(self, user_id: UUID) -> None:
        credential = await self._find_model_by_user_id(user_id)
        if credential:
            now = utc_now()
            credential.last_login_at = now
            credential.updated_at = now
            await self._session.flush()

    async def touch_credentials(self, user_id: UUID) -> None:
        credential = await self._find_model_by_user_id(user_id)
        if credential:
            now = utc_now()
            credential.credentials_updated_at = now
            credential.updated_at = now
            await self._session.flush()

    async def delete(self, user_id: UUID) -> bool:
        credential = await self._find_model_by_user_id(user_id)
        if credential:
            await self._session.delete(credential)
            await self._session.flush()
            logger.info("Deleted credentials for user: %s", user_id)
            return True
        return False

    async def is_account_locked(self, user_id: UUID) -> tuple[bool, datetime | None]:
        credential = await self._find_model_by_user_id(user_id)
        if not credential:
            return False, None

        locked_until = ensure_tz_aware(credential.locked_until)
        if locked_until and locked_until > utc_now():
            return True, locked_until

        return False, None
