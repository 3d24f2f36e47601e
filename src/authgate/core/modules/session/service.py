import hmac
import secrets
from uuid import UUID

import structlog

from authgate.core.core import Service
from authgate.core.modules.session.models import SessionRejection
from authgate.core.modules.token.models import SessionToken
from authgate.core.modules.user.models import User

logger = structlog.get_logger(__name__)

SESSION_TTL_SECONDS = 90 * 24 * 60 * 60


def session_key(user_id: UUID) -> str:
    return f"session:{user_id}"


class SessionService(Service):
    """Server-side session registry in the key-value store.

    One record per user holding the last issued token. The record's TTL is
    fixed at creation: reads never extend it. A token is trusted only while
    its record exists and still holds that exact token.
    """

    async def create_session(self, user_id: UUID) -> SessionToken:
        """Sign a token for the user and register it, superseding any previous session."""
        token = SessionToken(self.core.signer.sign({"sub": str(user_id), "jti": secrets.token_urlsafe(16)}))
        await self.create(user_id, token)
        return token

    async def create(self, user_id: UUID, token: str) -> None:
        await self.kv.set(session_key(user_id), token, SESSION_TTL_SECONDS)
        logger.debug("session_created", user_id=str(user_id), ttl=SESSION_TTL_SECONDS)

    async def remaining_ttl(self, user_id: UUID) -> int:
        """Seconds left on the user's session record, 0 when there is none."""
        return await self.kv.ttl(session_key(user_id))

    async def destroy(self, user_id: UUID) -> bool:
        """Delete the record, revoking trust in every token issued to this user."""
        removed = await self.kv.delete(session_key(user_id))
        logger.debug("session_destroyed", user_id=str(user_id), existed=removed)
        return removed

    async def check_session(self, token: str) -> User | None:
        """Resolve a presented token to a trusted user, or None.

        Store failures propagate as TransientStoreError.
        """
        claims = self.core.signer.verify(token)
        if claims is None:
            return self._reject(SessionRejection.INVALID_TOKEN)

        stored = await self.kv.get(session_key(claims.user_id))
        if stored is None:
            return self._reject(SessionRejection.REVOKED, claims.user_id)
        if not hmac.compare_digest(stored.encode(), token.encode()):
            return self._reject(SessionRejection.SUPERSEDED, claims.user_id)

        user = await self.core.services.user.find_user(claims.user_id)
        if user is None:
            return self._reject(SessionRejection.UNKNOWN_USER, claims.user_id)
        if user.is_banned:
            return self._reject(SessionRejection.BANNED, claims.user_id)
        return user

    def _reject(self, reason: SessionRejection, user_id: UUID | None = None) -> None:
        logger.debug("session_rejected", reason=reason, user_id=str(user_id) if user_id else None)
