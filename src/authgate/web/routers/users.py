from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from authgate.core.modules.ban.models import Ban
from authgate.core.modules.user.models import UserView
from authgate.core.pagination import PaginationResult
from authgate.web.deps import AppDep, SessionTokenDep
from authgate.web.openapi import ErrorResponse

router = APIRouter(tags=["users"])


class BanUserRequest(BaseModel):
    """Request to ban a user."""

    user_id: UUID = Field(..., description="User to ban")


class RevokeAllResponse(BaseModel):
    revoked: int = Field(..., description="Number of sessions removed")


@router.get(
    "/users",
    summary="List users",
    description="Get non-banned users, newest first. Only accessible by admin users.",
    operation_id="listUsers",
    responses={
        200: {"description": "Page of users"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def list_users(
    app: AppDep,
    token: SessionTokenDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
    search: Annotated[str | None, Query(description="Match on full name or username")] = None,
) -> PaginationResult[UserView]:
    return await app.get_users(token, limit, offset, search)


@router.get(
    "/users/bans",
    summary="List bans",
    description="Get banned phones, newest first. Only accessible by admin users.",
    operation_id="listBans",
    responses={
        200: {"description": "Page of bans"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def list_bans(
    app: AppDep,
    token: SessionTokenDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum items to return")] = 50,
    offset: Annotated[int, Query(ge=0, description="Number of items to skip")] = 0,
) -> PaginationResult[Ban]:
    return await app.get_bans(token, limit, offset)


@router.post(
    "/users/bans",
    summary="Ban user",
    description="Block the user's phone and revoke their session immediately. Only accessible by admin users.",
    operation_id="banUser",
    status_code=201,
    responses={
        201: {"description": "User banned"},
        400: {"model": ErrorResponse, "description": "Cannot ban yourself"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Phone already banned"},
    },
)
async def ban_user(request: BanUserRequest, app: AppDep, token: SessionTokenDep) -> Ban:
    return await app.ban_user(token, request.user_id)


@router.delete(
    "/users/bans/{ban_id}",
    summary="Unban user",
    description="Remove a ban. Only accessible by admin users.",
    operation_id="unbanUser",
    status_code=204,
    responses={
        204: {"description": "Ban removed"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "Ban not found"},
    },
)
async def unban_user(ban_id: UUID, app: AppDep, token: SessionTokenDep) -> None:
    await app.unban_user(token, ban_id)


@router.delete(
    "/users/{user_id}/sessions",
    summary="Revoke user session",
    description="Log a user out everywhere. Only accessible by admin users.",
    operation_id="revokeUserSessions",
    status_code=204,
    responses={
        204: {"description": "Session revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
)
async def revoke_user_sessions(user_id: UUID, app: AppDep, token: SessionTokenDep) -> None:
    await app.revoke_user_sessions(token, user_id)


@router.delete(
    "/sessions",
    summary="Revoke all sessions",
    description="Log out every user, including the caller. Only accessible by admin users.",
    operation_id="revokeAllSessions",
    responses={
        200: {"description": "Sessions revoked"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Admin privileges required"},
    },
)
async def revoke_all_sessions(app: AppDep, token: SessionTokenDep) -> RevokeAllResponse:
    return RevokeAllResponse(revoked=await app.revoke_all_sessions(token))
