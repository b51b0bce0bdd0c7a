"""User aggregate for identity concerns only."""

from collections.abc import Iterable
from datetime import datetime
from typing import Union
from uuid import UUID, uuid4

from lemon.domain.shared.time import utc_now
from lemon.domain.user.value_objects import Email, UserRole

EDIT_PERMISSION = "edit"


class User:
    """
    User aggregate root.

    Holds identity (email, name) and the role set. Password and lock-out
    data live in lemon_auth's credential store.
    """

    def __init__(
        self,
        email: Union[str, Email],
        name: str = "",
        roles: Iterable[Union[str, UserRole]] = (UserRole.UNVERIFIED,),
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._email = email if isinstance(email, Email) else Email(email)
        self._name = name.strip()
        self._roles = {UserRole(r) for r in roles}
        self._id = id or uuid4()
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def name(self) -> str:
        return self._name

    @property
    def roles(self) -> frozenset[UserRole]:
        return frozenset(self._roles)

    @property
    def is_unverified(self) -> bool:
        return UserRole.UNVERIFIED in self._roles

    @property
    def is_blocked(self) -> bool:
        return UserRole.BLOCKED in self._roles

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN in self._roles

    @property
    def is_good_user(self) -> bool:
        """Verified and not blocked."""
        return not (self.is_unverified or self.is_blocked)

    @property
    def is_good_admin(self) -> bool:
        return self.is_good_user and self.is_admin

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _touch(self) -> None:
        self._updated_at = utc_now()

    def mark_verified(self) -> None:
        self._roles.discard(UserRole.UNVERIFIED)
        self._touch()

    def block(self) -> None:
        self._roles.add(UserRole.BLOCKED)
        self._touch()

    def unblock(self) -> None:
        self._roles.discard(UserRole.BLOCKED)
        self._touch()

    def promote_to_admin(self) -> None:
        self._roles.add(UserRole.ADMIN)
        self._touch()

    def demote_to_user(self) -> None:
        self._roles.discard(UserRole.ADMIN)
        self._touch()

    def set_roles(self, roles: Iterable[Union[str, UserRole]]) -> None:
        self._roles = {UserRole(r) for r in roles}
        self._touch()

    def change_email(self, email: Union[str, Email]) -> None:
        self._email = email if isinstance(email, Email) else Email(email)
        self._touch()

    def rename(self, name: str) -> None:
        self._name = name.strip()
        self._touch()

    def has_permission(self, subject: "User | None", action: str) -> bool:
        """Users may be edited by themselves and by good admins."""
        if subject is None or action != EDIT_PERMISSION:
            return False
        return subject.id == self._id or subject.is_good_admin

    @classmethod
    def create(
        cls,
        email: Union[str, Email],
        name: str = "",
    ) -> "User":
        """Create a new, still unverified user."""
        return cls(email=email, name=name, roles=(UserRole.UNVERIFIED,))

    @classmethod
    def reconstitute(
        cls,
        id: UUID,
        email: Union[str, Email],
        name: str,
        roles: Iterable[Union[str, UserRole]],
        created_at: datetime,
        updated_at: datetime,
    ) -> "User":
        return cls(
            id=id,
            email=email,
            name=name,
            roles=roles,
            created_at=created_at,
            updated_at=updated_at,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self._email.value})"
