"""Authentication router for signup, login, and token management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query, Request, Response, status

from lemon.domain.user import User
from lemon.presentation.api.dependencies import (
    AuthService,
    CaptchaValidatorDep,
    CurrentUser,
    DBSession,
    PasswordResetServiceDep,
    SettingsDep,
    VerificationServiceDep,
    get_auth_failure_handler,
)
from lemon.presentation.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
)
from lemon.presentation.api.schemas.users import UserResponse
from lemon.presentation.api.security import (
    REFRESH_TOKEN_COOKIE,
    AuthenticationFailureHandler,
    clear_auth_cookies,
    set_refresh_token_cookie,
    set_remember_me_cookie,
)
from lemon_auth import AuthError
from lemon_auth.services import REMEMBER_ME_PARAMETER
from lemon_config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

FailureHandlerDep = Annotated[
    AuthenticationFailureHandler,
    Depends(get_auth_failure_handler),
]


def _create_auth_response(
    user: User,
    access_token: str,
    settings: Settings,
) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.from_user(user),
        access_token=access_token,
        refresh_token=None,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User registered successfully"},
        400: {"description": "Weak password or failed CAPTCHA"},
        409: {"description": "Email already registered"},
    },
)
async def signup(  # noqa: PLR0913
    body: SignupRequest,
    request: Request,
    response: Response,
    auth_service: AuthService,
    verification_service: VerificationServiceDep,
    captcha_validator: CaptchaValidatorDep,
    session: DBSession,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Register with email and password.

    The new user starts unverified and is mailed a verification link.
    The very first user becomes an admin.
    """
    remote_ip = request.client.host if request.client else None
    await captcha_validator.validate(body.captcha_response, remote_ip)

    user, access_token, refresh_token = await auth_service.register(
        email=body.email,
        password=body.password,
        name=body.name,
    )
    await verification_service.send_verification_mail(user)
    await session.commit()

    set_refresh_token_cookie(response, refresh_token, settings)

    logger.info("New user signed up: %s", user.id)
    return _create_auth_response(user, access_token, settings)


@router.post(
    "/login",
    summary="Authenticate user",
    response_model=AuthResponse,
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
        403: {"description": "Account blocked"},
        423: {"description": "Account locked"},
    },
)
async def login(  # noqa: PLR0913
    body: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    failure_handler: FailureHandlerDep,
    remember_me_param: Annotated[
        bool | None,
        Query(alias=REMEMBER_ME_PARAMETER),
    ] = None,
):
    """
    Authenticate with email and password.

    Returns an access token on successful authentication.
    The refresh token is set as an HttpOnly cookie for security. With
    ``rememberMe`` (body field or query parameter) a remember-me cookie
    is set as well.

    Failures go to the configured authentication failure handler.
    """
    try:
        user, access_token, refresh_token = await auth_service.login(
            email=body.email,
            password=body.password,
        )
        remember_me = body.remember_me or bool(remember_me_param)
        remember_me_value = (
            await auth_service.issue_remember_me_token(user) if remember_me else None
        )
    except AuthError as e:
        await session.commit()  # Commit failed attempt count
        return await failure_handler.on_failure(request, e)

    await session.commit()

    set_refresh_token_cookie(response, refresh_token, settings)
    if remember_me_value is not None:
        set_remember_me_cookie(response, remember_me_value, settings)

    return _create_auth_response(user, access_token, settings)


@router.post(
    "/refresh",
    summary="Refresh access token",
    responses={
        200: {"description": "Tokens refreshed successfully"},
        401: {"description": "Invalid or expired refresh token"},
    },
)
async def refresh_token(
    response: Response,
    auth_service: AuthService,
    settings: SettingsDep,
    body: RefreshRequest | None = None,
    refresh_token_cookie: Annotated[
        str | None,
        Cookie(alias=REFRESH_TOKEN_COOKIE),
    ] = None,
) -> TokenResponse:
    """
    Get a new access token using a valid refresh token.

    The refresh token can be provided either:
    - In the request body
    - Via HttpOnly cookie (preferred, automatic)

    A new refresh token is set as an HttpOnly cookie (token rotation).
    """
    token = None
    if body and body.refresh_token:
        token = body.refresh_token
    elif refresh_token_cookie:
        token = refresh_token_cookie

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No refresh token provided",
        )

    access_token, new_refresh_token = await auth_service.refresh_token(token)

    set_refresh_token_cookie(response, new_refresh_token, settings)

    return TokenResponse(
        access_token=access_token,
        refresh_token=None,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout user",
)
async def logout(response: Response, settings: SettingsDep) -> None:
    """Forget the refresh and remember-me cookies."""
    clear_auth_cookies(response, settings)
    logger.debug("User logged out (auth cookies cleared)")


@router.post(
    "/change-password",
    summary="Change password",
    responses={
        200: {"description": "Password changed, fresh tokens issued"},
        400: {"description": "New password too weak"},
        401: {"description": "Current password incorrect or not authenticated"},
        422: {"description": "Retyped password does not match"},
    },
)
async def change_password(  # noqa: PLR0913
    body: ChangePasswordRequest,
    response: Response,
    user: CurrentUser,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> TokenResponse:
    """
    Change the current user's password.

    Every token and remember-me cookie issued before the change stops
    working, so a fresh token pair is returned.
    """
    await auth_service.change_password(
        user_id=user.id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    await session.commit()

    access_token, new_refresh_token = auth_service.create_token_pair(user)
    set_refresh_token_cookie(response, new_refresh_token, settings)

    return TokenResponse(
        access_token=access_token,
        refresh_token=None,
        expires_in=settings.jwt_access_token_expire_minutes * 60,
    )


@router.post(
    "/forgot-password",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request password reset",
    responses={
        202: {"description": "If the email exists, a reset link has been sent"},
    },
)
async def forgot_password(
    body: ForgotPasswordRequest,
    service: PasswordResetServiceDep,
    session: DBSession,
) -> MessageResponse:
    """Request a password reset email."""
    await service.request_reset(body.email)
    await session.commit()

    return MessageResponse(message="If the email exists, a reset link has been sent.")


@router.post(
    "/reset-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset password with a mailed code",
    responses={
        204: {"description": "Password reset successfully"},
        400: {"description": "Invalid or expired code, or weak password"},
    },
)
async def reset_password(
    body: ResetPasswordRequest,
    service: PasswordResetServiceDep,
    session: DBSession,
) -> None:
    await service.reset_password(code=body.code, new_password=body.new_password)
    await session.commit()
    logger.info("Password reset completed")
