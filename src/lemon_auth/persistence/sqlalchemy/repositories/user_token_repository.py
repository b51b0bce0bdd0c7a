"""SQLAlchemy implementation of UserTokenRepository."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lemon.domain.shared.time import ensure_tz_aware, utc_now
from lemon_auth.persistence.sqlalchemy.models import UserTokenModel
from lemon_auth.repositories import TokenPurpose, UserTokenData, UserTokenRepository

logger = logging.getLogger(__name__)


class UserTokenRepositorySQLAlchemy(UserTokenRepository):
    """SQLAlchemy implementation of the single-use token repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_data(self, model: UserTokenModel) -> UserTokenData:
        return UserTokenData(
            id=UUID(model.id),
            user_id=UUID(model.user_id),
            purpose=TokenPurpose(model.purpose),
            token_hash=model.token_hash,
            expires_at=ensure_tz_aware(model.expires_at),
            used_at=ensure_tz_aware(model.used_at),
            created_at=ensure_tz_aware(model.created_at),
            payload=model.payload,
        )

    async def create(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        token_hash: str,
        expires_at: datetime,
        payload: str | None = None,
    ) -> UUID:
        model = UserTokenModel(
            user_id=str(user_id),
            purpose=purpose.value,
            token_hash=token_hash,
            payload=payload,
            expires_at=expires_at,
            created_at=utc_now(),
        )
        self._session.add(model)
        await self._session.flush()
        logger.debug("Created %s token for user: %s", purpose.value, user_id)
        return UUID(model.id)

    async def find_valid_by_hash(
        self,
        purpose: TokenPurpose,
        token_hash: str,
    ) -> UserTokenData | None:
        stmt = select(UserTokenModel).where(
            UserTokenModel.token_hash == token_hash,
            UserTokenModel.purpose == purpose.value,
            UserTokenModel.used_at.is_(None),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def mark_used(self, token_id: UUID) -> None:
        stmt = (
            update(UserTokenModel)
            .where(UserTokenModel.id == str(token_id))
            .values(used_at=utc_now())
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def invalidate_all_for_user(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
    ) -> None:
        stmt = (
            update(UserTokenModel)
            .where(
                UserTokenModel.user_id == str(user_id),
                UserTokenModel.purpose == purpose.value,
                UserTokenModel.used_at.is_(None),
            )
            .values(used_at=utc_now())
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def count_recent_for_user(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        since: datetime,
    ) -> int:
        stmt = select(func.count()).where(
            UserTokenModel.user_id == str(user_id),
            UserTokenModel.purpose == purpose.value,
            UserTokenModel.created_at >= since,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def cleanup_expired(self, expired_before: datetime | None = None) -> int:
        cutoff = expired_before or utc_now()
        stmt = delete(UserTokenModel).where(UserTokenModel.expires_at < cutoff)
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0
        if deleted:
            logger.info("Removed %d expired user tokens", deleted)
        return deleted
