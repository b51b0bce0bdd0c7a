from enum import Enum


class UserRole(str, Enum):
    """Roles a user can hold; an empty set means a verified, ordinary user."""

    UNVERIFIED = "UNVERIFIED"
    BLOCKED = "BLOCKED"
    ADMIN = "ADMIN"
