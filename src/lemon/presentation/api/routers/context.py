"""Client context: public configuration plus the current user."""

from fastapi import APIRouter

from lemon.presentation.api.dependencies import OptionalCurrentUser, SettingsDep
from lemon.presentation.api.schemas.common import ContextResponse
from lemon.presentation.api.schemas.users import UserResponse

router = APIRouter()


@router.get("", summary="Get client context")
async def get_context(
    user: OptionalCurrentUser,
    settings: SettingsDep,
) -> ContextResponse:
    """Everything a client needs before its first page: where the
    application lives, the public CAPTCHA key, and who is logged in
    (null when anonymous)."""
    return ContextResponse(
        application_url=settings.application_url,
        recaptcha_site_key=settings.recaptcha_site_key,
        json_prefix_enabled=settings.json_prefix_enabled,
        user=UserResponse.from_user(user) if user else None,
    )
