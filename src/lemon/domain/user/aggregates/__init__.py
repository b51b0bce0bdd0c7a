from lemon.domain.user.aggregates.user import EDIT_PERMISSION, User

__all__ = ["EDIT_PERMISSION", "User"]
