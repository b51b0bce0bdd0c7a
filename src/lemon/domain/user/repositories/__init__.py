from lemon.domain.user.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
