from uuid import UUID

import structlog

from authgate.core.core import Service

logger = structlog.get_logger(__name__)


class RevocationService(Service):
    """Out-of-band invalidation of server trust, independent of token expiry."""

    async def revoke_all(self, user_id: UUID) -> bool:
        """Drop the user's session record. A single delete: the registry keeps one record per user."""
        revoked = await self.core.services.session.destroy(user_id)
        logger.info("sessions_revoked", user_id=str(user_id), existed=revoked)
        return revoked

    async def purge(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. For administrative bulk operations."""
        keys = await self.kv.scan(pattern)
        deleted = 0
        for key in keys:
            if await self.kv.delete(key):
                deleted += 1
        logger.info("keys_purged", pattern=pattern, matched=len(keys), deleted=deleted)
        return deleted

    async def revoke_everyone(self) -> int:
        """Log out every user."""
        return await self.purge("session:*")
