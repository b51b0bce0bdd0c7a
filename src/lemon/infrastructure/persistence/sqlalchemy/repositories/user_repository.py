"""SQLAlchemy implementation of UserRepository."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lemon.domain.shared.time import ensure_tz_aware
from lemon.domain.user import (
    Email,
    EmailAlreadyExistsError,
    User,
    UserRepository,
    UserRole,
)
from lemon.infrastructure.persistence.sqlalchemy.models import UserModel

logger = logging.getLogger(__name__)


def _roles_to_column(roles: frozenset[UserRole]) -> str:
    return ",".join(sorted(role.value for role in roles))


def _roles_from_column(value: str) -> list[UserRole]:
    return [UserRole(part) for part in value.split(",") if part]


class UserRepositorySQLAlchemy(UserRepository):
    """SQLAlchemy implementation of the UserRepository interface."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, user_id: UUID) -> User | None:
        model = await self._find_model_by_id(user_id)
        if model is None:
            return None
        return self._map_to_domain(model)

    async def find_by_email(self, email: str) -> User | None:
        email_value = Email(email).value

        stmt = select(UserModel).where(UserModel.email == email_value)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def exists_by_email(self, email: str) -> bool:
        user = await self.find_by_email(email)
        return user is not None

    async def save(self, user: User) -> None:
        existing = await self._find_model_by_id(user.id)

        try:
            if existing:
                self._update_model(existing, user)
                logger.debug("Updated user: %s", user.id)
            else:
                model = self._map_to_model(user)
                self._session.add(model)
                logger.info("Created user: %s (email: %s)", user.id, user.email)

            await self._session.flush()
        except IntegrityError as e:
            if "UNIQUE constraint failed" in str(e) or "unique" in str(e).lower():
                raise EmailAlreadyExistsError(user.email) from e
            raise

    async def delete(self, user_id: UUID) -> bool:
        model = await self._find_model_by_id(user_id)
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        logger.info("Deleted user: %s", user_id)
        return True

    async def count(self) -> int:
        stmt = select(func.count()).select_from(UserModel)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def list_all(self) -> list[User]:
        stmt = select(UserModel).order_by(UserModel.created_at)
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        return [self._map_to_domain(model) for model in models]

    async def _find_model_by_id(self, user_id: UUID) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _map_to_domain(self, model: UserModel) -> User:
        return User.reconstitute(
            id=model.id,
            email=model.email,
            name=model.name,
            roles=_roles_from_column(model.roles),
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, user: User) -> UserModel:
        return UserModel(
            id=user.id,
            email=user.email,
            name=user.name,
            roles=_roles_to_column(user.roles),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def _update_model(self, model: UserModel, user: User) -> None:
        model.email = user.email
        model.name = user.name
        model.roles = _roles_to_column(user.roles)
        model.updated_at = user.updated_at
