"""Authentication failure handling and auth cookies.

Cookies:
- Refresh token: HttpOnly, path restricted to the auth endpoints
- Remember-me: HttpOnly, whole site, signed by RememberMeService
"""

import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse

from lemon_auth.exceptions import AuthError
from lemon_auth.services import REMEMBER_ME_COOKIE
from lemon_config.settings import Settings

logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"

# Cookie name for refresh token
REFRESH_TOKEN_COOKIE = "lemon_refresh_token"  # NOQA: S105
REFRESH_TOKEN_COOKIE_PATH = f"{API_V1_PREFIX}/auth"


class AuthenticationFailureHandler:
    """Answers failed logins.

    Default: the normalized 401 error payload. With ``failure_url`` set,
    a ``303 See Other`` redirect there instead. Pass a subclass or any
    object with the same ``on_failure`` coroutine to ``create_app`` to
    replace it.
    """

    def __init__(self, failure_url: str | None = None):
        self._failure_url = failure_url

    async def on_failure(self, request: Request, exc: AuthError) -> Response:
        logger.info(
            "Authentication failed on %s %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
        )

        if self._failure_url:
            return RedirectResponse(
                self._failure_url,
                status_code=status.HTTP_303_SEE_OTHER,
            )

        normalizer = request.app.state.error_normalizer
        response_class: type[JSONResponse] = request.app.state.json_response_class
        error = normalizer.normalize(exc)
        return response_class(
            status_code=error.status,
            content=error.to_payload(),
            headers=error.headers,
        )


def set_refresh_token_cookie(
    response: Response,
    token: str,
    settings: Settings,
) -> None:
    """Set the refresh token as an HttpOnly cookie.

    This cookie is:
    - HttpOnly: Not accessible to JavaScript (XSS protection)
    - Secure: Only sent over HTTPS (when cookie_secure=True)
    - SameSite: Prevents CSRF attacks
    - Path restricted: Only sent to the auth endpoints
    """
    max_age_seconds = settings.jwt_refresh_token_expire_days * 24 * 60 * 60

    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=max_age_seconds,
        path=REFRESH_TOKEN_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def set_remember_me_cookie(
    response: Response,
    value: str,
    settings: Settings,
) -> None:
    response.set_cookie(
        key=REMEMBER_ME_COOKIE,
        value=value,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=settings.remember_me_validity_seconds,
        path="/",
        domain=settings.api_cookie_domain,
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    """Clear refresh and remember-me cookies (for logout)."""
    response.delete_cookie(
        key=REFRESH_TOKEN_COOKIE,
        path=REFRESH_TOKEN_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )
    response.delete_cookie(
        key=REMEMBER_ME_COOKIE,
        path="/",
        domain=settings.api_cookie_domain,
    )
