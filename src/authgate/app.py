from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

import structlog

from authgate.config import Config
from authgate.core.core import Core
from authgate.core.modules.ban.models import Ban
from authgate.core.modules.credential.models import Credentials, SnapshotCookie
from authgate.core.modules.otp.models import OtpStatus
from authgate.core.modules.otp.sender import send_otp_sms
from authgate.core.modules.user.models import User, UserView
from authgate.core.modules.user.validators import validate_phone
from authgate.core.pagination import PaginationResult
from authgate.errors import AuthenticationError, DeliveryError, OtpCooldownError, ValidationError

logger = structlog.get_logger(__name__)


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config) -> None:
        self._core = Core(config)

    @property
    def config(self) -> Config:
        return self._core.config

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def is_healthy(self) -> bool:
        return await self._core.kv.ping()

    # === Authentication ===
    async def request_otp(self, phone: str) -> OtpStatus:
        """Issue and deliver an OTP unless a previous one is still live."""
        validate_phone(phone)
        status = await self._core.services.otp.status(phone)
        if not status.expired:
            raise OtpCooldownError(status.ttl)

        code = await self._core.services.otp.issue(phone)
        try:
            await send_otp_sms(self._core.config, phone, code)
        except DeliveryError:
            await self._core.services.otp.discard(phone)
            raise
        return await self._core.services.otp.status(phone)

    async def get_otp_status(self, phone: str) -> OtpStatus:
        validate_phone(phone)
        return await self._core.services.otp.status(phone)

    async def login(self, phone: str, code: str) -> Credentials:
        """Consume the OTP, sign up unknown phones, register a session and build its cookies."""
        validate_phone(phone)
        result = await self._core.services.otp.verify(phone, code)
        if not result.matched:
            raise AuthenticationError

        user = await self._resolve_or_signup(phone)
        token = await self._core.services.session.create_session(user.id)
        logger.info("user_logged_in", user_id=str(user.id))
        return await self._core.services.credential.issue(user, token)

    async def check_session(self, token: str) -> User | None:
        """Trusted user for a session token, or None."""
        return await self._core.services.session.check_session(token)

    async def logout(self, token: str) -> None:
        """Invalidate the caller's session."""
        current_user = await self._core.services.access.ensure_authenticated(token)
        await self._core.services.revocation.revoke_all(current_user.id)

    # === Profile ===
    async def get_current_user(self, token: str) -> UserView:
        current_user = await self._core.services.access.ensure_authenticated(token)
        return UserView.from_domain(current_user)

    async def update_profile(
        self, token: str, fullname: str | None, username: str | None, profile: str | None
    ) -> tuple[UserView, SnapshotCookie | None]:
        """Update the profile and rebuild the profile cookie from the session's remaining lifetime."""
        current_user = await self._core.services.access.ensure_authenticated(token)
        user = await self._core.services.user.update_profile(current_user.id, fullname, username, profile)
        cookie = await self._core.services.credential.resync(user)
        return UserView.from_domain(user), cookie

    async def change_password(self, token: str, old_password: str | None, new_password: str) -> None:
        current_user = await self._core.services.access.ensure_authenticated(token)
        await self._core.services.user.change_password(current_user.id, old_password, new_password)

    # === Administration ===
    async def get_users(
        self, token: str, limit: int = 50, offset: int = 0, search: str | None = None
    ) -> PaginationResult[UserView]:
        """List non-banned users (admin only)."""
        await self._core.services.access.ensure_admin(token)
        result = await self._core.services.user.list_users(limit, offset, search)
        return result.map(UserView.from_domain)

    async def get_bans(self, token: str, limit: int = 50, offset: int = 0) -> PaginationResult[Ban]:
        await self._core.services.access.ensure_admin(token)
        return await self._core.services.ban.list_bans(limit, offset)

    async def ban_user(self, token: str, user_id: UUID) -> Ban:
        """Flag the user, block the phone and revoke the session before returning (admin only)."""
        current_user = await self._core.services.access.ensure_admin(token)
        if user_id == current_user.id:
            raise ValidationError("Cannot ban yourself")

        user = await self._core.services.user.set_banned(user_id, True)
        ban = await self._core.services.ban.create_ban(user.phone, user.id)
        await self._core.services.revocation.revoke_all(user.id)
        logger.info("user_banned", user_id=str(user.id), by=str(current_user.id))
        return ban

    async def unban_user(self, token: str, ban_id: UUID) -> None:
        """Lift a ban (admin only). Any session left over from before the ban is revoked as well."""
        await self._core.services.access.ensure_admin(token)
        ban = await self._core.services.ban.get_ban(ban_id)
        await self._core.services.ban.delete_ban(ban.id)
        await self._core.services.user.set_banned(ban.user_id, False)
        await self._core.services.revocation.revoke_all(ban.user_id)
        logger.info("user_unbanned", user_id=str(ban.user_id))

    async def revoke_user_sessions(self, token: str, user_id: UUID) -> None:
        await self._core.services.access.ensure_admin(token)
        await self._core.services.user.get_user(user_id)
        await self._core.services.revocation.revoke_all(user_id)

    async def revoke_all_sessions(self, token: str) -> int:
        """Log out every user, including the caller (admin only)."""
        await self._core.services.access.ensure_admin(token)
        return await self._core.services.revocation.revoke_everyone()

    # === Private resolver methods ===
    async def _resolve_or_signup(self, phone: str) -> User:
        """Existing account for the phone, or a new one unless the phone is banned."""
        user = await self._core.services.user.find_user_by_phone(phone)
        if user is None:
            if await self._core.services.ban.is_phone_banned(phone):
                logger.info("banned_phone_signup_refused")
                raise AuthenticationError
            return await self._core.services.user.create_user(phone)
        if user.is_banned:
            raise AuthenticationError
        return user
