from datetime import datetime, timedelta
from uuid import UUID

import structlog

from authgate.core.core import Service
from authgate.core.modules.credential.models import Credentials, SnapshotCookie
from authgate.core.modules.user.models import User, UserSnapshot
from authgate.utils import now

logger = structlog.get_logger(__name__)


class CredentialService(Service):
    """Builds client cookies whose expiry is read from the session registry.

    Expiry is never a fixed constant: a resync late in a session's life must
    not hand the client a fresh full-length cookie.
    """

    async def issue(self, user: User, token: str) -> Credentials:
        """Credentials for a session that was just registered."""
        expires = await self._expires_at(user.id)
        return Credentials(token=token, snapshot=UserSnapshot.from_domain(user), expires=expires)

    async def resync(self, user: User) -> SnapshotCookie | None:
        """Rebuild the profile cookie after a profile change.

        Returns None when the session record is already gone; callers then
        leave the client cookie alone. No token is signed and the registry
        TTL is not touched.
        """
        ttl = await self.core.services.session.remaining_ttl(user.id)
        if ttl == 0:
            logger.debug("credential_resync_skipped", user_id=str(user.id))
            return None
        return SnapshotCookie(snapshot=UserSnapshot.from_domain(user), expires=now() + timedelta(seconds=ttl))

    async def _expires_at(self, user_id: UUID) -> datetime:
        ttl = await self.core.services.session.remaining_ttl(user_id)
        return now() + timedelta(seconds=ttl)
