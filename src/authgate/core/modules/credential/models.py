from datetime import datetime

from pydantic import BaseModel

from authgate.core.modules.user.models import UserSnapshot

SESSION_COOKIE = "_session"
USER_COOKIE = "_user"


class SnapshotCookie(BaseModel):
    """Readable profile cookie and the moment it must stop being sent."""

    snapshot: UserSnapshot
    expires: datetime


class Credentials(BaseModel):
    """Session cookie plus profile cookie, both expiring with the session record."""

    token: str
    snapshot: UserSnapshot
    expires: datetime

    @property
    def snapshot_cookie(self) -> SnapshotCookie:
        return SnapshotCookie(snapshot=self.snapshot, expires=self.expires)
