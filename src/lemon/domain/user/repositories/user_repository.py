"""User repository interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from lemon.domain.user.aggregates import User


class UserRepository(ABC):
    """Repository interface for User aggregate."""

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        """Check whether an account already uses ``email``."""

    @abstractmethod
    async def save(self, user: User) -> None:
        """Insert or update a user.

        Raises
        ------
        EmailAlreadyExistsError
            If another user already holds the email
        """

    @abstractmethod
    async def delete(self, user_id: UUID) -> bool:
        """Delete a user. Returns False if it did not exist."""

    @abstractmethod
    async def count(self) -> int:
        """Number of registered users."""

    @abstractmethod
    async def list_all(self) -> list[User]:
        """All users, oldest first."""
