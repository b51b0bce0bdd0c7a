from lemon.presentation.api.routers.auth import router as auth_router
from lemon.presentation.api.routers.context import router as context_router
from lemon.presentation.api.routers.users import router as users_router

__all__ = [
    "auth_router",
    "context_router",
    "users_router",
]
