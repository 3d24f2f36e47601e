from fastapi import APIRouter, Response
from pydantic import BaseModel, Field

from authgate.core.modules.otp.models import OtpStatus
from authgate.core.modules.user.models import UserSnapshot
from authgate.web.cookies import clear_credential_cookies, set_credential_cookies
from authgate.web.deps import AppDep, ConfigDep, SessionTokenDep
from authgate.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


class OtpRequest(BaseModel):
    """Request a one-time code for a phone."""

    phone: str = Field(..., description="Phone number the code is sent to")


class LoginRequest(BaseModel):
    """Authentication request."""

    phone: str = Field(..., description="Phone number the code was sent to")
    code: str = Field(..., min_length=1, max_length=12, description="One-time code")


class LoginResponse(BaseModel):
    """Authentication response. The session token itself is only sent as an httpOnly cookie."""

    user: UserSnapshot


@router.post(
    "/auth/otp",
    summary="Send login code",
    description="Send a one-time code to the phone. Refused while a previous code is still live.",
    operation_id="requestOtp",
    responses={
        200: {"description": "Code sent, returns its remaining lifetime"},
        400: {"model": ErrorResponse, "description": "Invalid phone number"},
        429: {"model": ErrorResponse, "description": "A code was sent recently"},
        503: {"model": ErrorResponse, "description": "Code could not be delivered"},
    },
)
async def request_otp(otp_data: OtpRequest, app: AppDep) -> OtpStatus:
    return await app.request_otp(otp_data.phone)


@router.get(
    "/auth/otp/{phone}",
    summary="Login code status",
    description="Whether a code is live for the phone and how long until it expires, for resend countdowns.",
    operation_id="getOtpStatus",
    responses={
        200: {"description": "Current code status"},
        400: {"model": ErrorResponse, "description": "Invalid phone number"},
    },
)
async def get_otp_status(phone: str, app: AppDep) -> OtpStatus:
    return await app.get_otp_status(phone)


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Exchange a one-time code for a session. Unknown phones are signed up.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated, session cookies set"},
        401: {"model": ErrorResponse, "description": "Invalid or expired code"},
    },
)
async def login(login_data: LoginRequest, app: AppDep, config: ConfigDep, response: Response) -> LoginResponse:
    """Authenticate user and create session."""
    credentials = await app.login(login_data.phone, login_data.code)
    set_credential_cookies(response, credentials, secure=config.is_production)
    return LoginResponse(user=credentials.snapshot)


@router.post(
    "/auth/logout",
    summary="End session",
    description="Revoke the current session on the server and clear the cookies.",
    operation_id="logout",
    status_code=204,
    responses={
        204: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    },
)
async def logout(app: AppDep, config: ConfigDep, token: SessionTokenDep, response: Response) -> None:
    await app.logout(token)
    clear_credential_cookies(response, secure=config.is_production)
