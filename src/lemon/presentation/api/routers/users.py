"""User router: lookups, profile updates, verification and email change.

Static paths are declared before ``/{user_id}`` so they are not parsed
as user ids.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Query, status

from lemon.infrastructure.persistence.sqlalchemy import UserRepositorySQLAlchemy
from lemon.presentation.api.dependencies import (
    AdminUser,
    CurrentUser,
    DBSession,
    EmailChangeServiceDep,
    OptionalCurrentUser,
    UserServiceDep,
    VerificationServiceDep,
)
from lemon.presentation.api.schemas.auth import MessageResponse
from lemon.presentation.api.schemas.users import (
    EmailChangeRequest,
    UpdateUserRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="List all users",
    responses={
        200: {"description": "List of all users"},
        403: {"description": "Admin access required"},
    },
)
async def list_users(
    _admin: AdminUser,  # Used for authorization check
    session: DBSession,
) -> list[UserResponse]:
    user_repo = UserRepositorySQLAlchemy(session)
    users = await user_repo.list_all()
    return [UserResponse.from_user(u) for u in users]


@router.get(
    "/me",
    summary="Get current user",
    responses={
        200: {"description": "Current user data"},
        401: {"description": "Not authenticated"},
    },
)
async def get_me(user: CurrentUser) -> UserResponse:
    """
    Get the current authenticated user's information.

    Accepts a bearer access token or a remember-me cookie.
    """
    return UserResponse.from_user(user)


@router.get(
    "/fetch-by-email",
    summary="Look up a user by email",
    responses={404: {"description": "User not found"}},
)
async def fetch_by_email(
    viewer: OptionalCurrentUser,
    service: UserServiceDep,
    email: str = Query(..., min_length=1),
) -> UserResponse:
    view = await service.fetch_by_email(viewer, email)
    return UserResponse.from_view(view)


@router.get(
    "/{user_id}",
    summary="Look up a user by id",
    responses={404: {"description": "User not found"}},
)
async def fetch_by_id(
    user_id: UUID,
    viewer: OptionalCurrentUser,
    service: UserServiceDep,
) -> UserResponse:
    """The email is only included for the user themself and admins."""
    view = await service.fetch_by_id(viewer, user_id)
    return UserResponse.from_view(view)


@router.patch(
    "/{user_id}",
    summary="Update a user",
    responses={
        403: {"description": "Not allowed to edit this user"},
        404: {"description": "User not found"},
    },
)
async def update_user(
    user_id: UUID,
    body: UpdateUserRequest,
    user: CurrentUser,
    service: UserServiceDep,
    session: DBSession,
) -> UserResponse:
    """
    Update name and roles.

    Roles are only changed when a verified admin edits another user;
    otherwise they are left as they are.
    """
    updated = await service.update_user(
        user,
        user_id,
        name=body.name,
        roles=body.roles,
    )
    await session.commit()
    return UserResponse.from_user(updated)


@router.post(
    "/{user_id}/verification",
    summary="Verify email with a mailed code",
    responses={400: {"description": "Invalid or expired code"}},
)
async def verify_user(
    user_id: UUID,
    service: VerificationServiceDep,
    session: DBSession,
    code: str = Query(..., min_length=1),
) -> UserResponse:
    user = await service.verify_user(user_id, code)
    await session.commit()
    return UserResponse.from_user(user)


@router.post(
    "/{user_id}/resend-verification-mail",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a new verification mail",
    responses={
        403: {"description": "Not allowed to edit this user"},
        422: {"description": "User is already verified"},
    },
)
async def resend_verification_mail(
    user_id: UUID,
    user: CurrentUser,
    service: VerificationServiceDep,
    session: DBSession,
) -> MessageResponse:
    await service.resend_verification_mail(user, user_id)
    await session.commit()
    return MessageResponse(message="Verification mail sent.")


@router.post(
    "/{user_id}/email-change-request",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request an email change",
    responses={
        401: {"description": "Password incorrect"},
        409: {"description": "Email already registered"},
    },
)
async def request_email_change(  # noqa: PLR0913
    user_id: UUID,
    body: EmailChangeRequest,
    user: CurrentUser,
    service: EmailChangeServiceDep,
    session: DBSession,
) -> MessageResponse:
    """Mail a confirmation code to the new address."""
    await service.request_email_change(
        user,
        user_id,
        password=body.password,
        new_email=body.new_email,
    )
    await session.commit()
    return MessageResponse(message="A confirmation link has been sent to the new address.")


@router.post(
    "/{user_id}/email",
    summary="Confirm an email change",
    responses={400: {"description": "Invalid or expired code"}},
)
async def change_email(
    user_id: UUID,
    user: CurrentUser,
    service: EmailChangeServiceDep,
    session: DBSession,
    code: str = Query(..., min_length=1),
) -> UserResponse:
    updated = await service.change_email(user, user_id, code)
    await session.commit()
    logger.info("Email change confirmed for user: %s", user_id)
    return UserResponse.from_user(updated)
