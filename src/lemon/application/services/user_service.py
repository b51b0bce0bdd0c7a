"""User lookup, profile updates and admin seeding."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from lemon.domain.security import PermissionEvaluator
from lemon.domain.user import (
    EDIT_PERMISSION,
    User,
    UserNotFoundError,
    UserRepository,
    UserRole,
)
from lemon_auth import PasswordHashingService
from lemon_auth.repositories import UserCredentialRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserView:
    """A user as seen by someone; ``email`` is None when hidden."""

    id: UUID
    email: str | None
    name: str
    roles: frozenset[UserRole]
    created_at: datetime

    @classmethod
    def of(cls, user: User, email_visible: bool) -> "UserView":
        return cls(
            id=user.id,
            email=user.email if email_visible else None,
            name=user.name,
            roles=user.roles,
            created_at=user.created_at,
        )


class UserService:
    def __init__(
        self,
        user_repository: UserRepository,
        credential_repository: UserCredentialRepository,
        password_service: PasswordHashingService,
        permission_evaluator: PermissionEvaluator,
    ):
        self._user_repo = user_repository
        self._credential_repo = credential_repository
        self._password_service = password_service
        self._permission_evaluator = permission_evaluator

    def _view(self, viewer: User | None, user: User) -> UserView:
        visible = self._permission_evaluator.has_permission(viewer, user, EDIT_PERMISSION)
        return UserView.of(user, email_visible=visible)

    async def fetch_by_id(self, viewer: User | None, user_id: UUID) -> UserView:
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return self._view(viewer, user)

    async def fetch_by_email(self, viewer: User | None, email: str) -> UserView:
        user = await self._user_repo.find_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        return self._view(viewer, user)

    async def update_user(
        self,
        current_user: User | None,
        user_id: UUID,
        name: str | None = None,
        roles: Iterable[UserRole] | None = None,
    ) -> User:
        """Update name and, for good admins editing someone else, roles.

        Role changes from anyone else are ignored.
        """
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))

        self._permission_evaluator.ensure_permission(current_user, user, EDIT_PERMISSION)

        if name is not None:
            user.rename(name)

        if roles is not None:
            if current_user.is_good_admin and current_user.id != user.id:
                user.set_roles(roles)
                logger.info("Roles of user %s set by admin %s", user.id, current_user.id)
            else:
                logger.debug("Ignoring role change for user %s", user.id)

        await self._user_repo.save(user)
        return user

    async def ensure_admin(self, email: str, password: str) -> User:
        """Create the first admin unless a user with ``email`` exists."""
        existing = await self._user_repo.find_by_email(email)
        if existing is not None:
            logger.debug("Admin seed skipped, user exists: %s", existing.id)
            return existing

        password_hash = self._password_service.hash(password)
        user = User(email=email, roles=(UserRole.ADMIN,))
        await self._user_repo.save(user)
        await self._credential_repo.save(user_id=user.id, password_hash=password_hash)

        logger.info("Created admin user: %s", user.email)
        return user
