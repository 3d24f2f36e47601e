from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from authgate.core.modules.user.models import UserView
from authgate.web.cookies import set_snapshot_cookie
from authgate.web.deps import AppDep, ConfigDep, SessionTokenDep
from authgate.web.openapi import ErrorResponse

router = APIRouter(tags=["profile"])


class UpdateProfileRequest(BaseModel):
    """Partial profile update. Omitted fields are left unchanged."""

    fullname: str | None = Field(None, min_length=1, max_length=100, description="Full name")
    username: str | None = Field(None, description="Unique username")
    profile: str | None = Field(None, description="Avatar path")


class ChangePasswordRequest(BaseModel):
    """Request to set or change user password."""

    old_password: str | None = Field(None, description="Current password, required once a password is set")
    new_password: str = Field(..., min_length=1, description="New password")


@router.get(
    "/profile",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getCurrentUserProfile",
    responses={
        200: {"description": "Current user profile"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def get_profile(app: AppDep, token: SessionTokenDep) -> UserView:
    return await app.get_current_user(token)


@router.patch(
    "/profile",
    summary="Update current user profile",
    description=(
        "Update profile fields. The readable user cookie is rewritten with the expiry of the "
        "existing session; the session itself is not extended."
    ),
    operation_id="updateCurrentUserProfile",
    responses={
        200: {"description": "Updated profile"},
        400: {"model": ErrorResponse, "description": "Invalid request"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        409: {"model": ErrorResponse, "description": "Username already taken"},
    },
)
async def update_profile(
    request: UpdateProfileRequest, app: AppDep, config: ConfigDep, token: SessionTokenDep, response: Response
) -> UserView:
    user, cookie = await app.update_profile(token, request.fullname, request.username, request.profile)
    if cookie is not None:
        set_snapshot_cookie(response, cookie, secure=config.is_production)
    return user


@router.post(
    "/profile/change-password",
    summary="Change password",
    description="Set or change the password for the currently authenticated user.",
    operation_id="changePassword",
    status_code=204,
    responses={
        204: {"description": "Password changed successfully"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        400: {"model": ErrorResponse, "description": "Invalid current password or weak new password"},
    },
)
async def change_password(request: ChangePasswordRequest, app: AppDep, token: SessionTokenDep) -> None:
    await app.change_password(token, request.old_password, request.new_password)
