from datetime import datetime
from uuid import UUID

from pydantic import Field

from authgate.core.db import MongoModel
from authgate.utils import now


class Ban(MongoModel):
    """Blocks a phone from signing up again. Never edited, only deleted by unban.

    Indexed on phone - unique.
    """

    phone: str
    user_id: UUID
    created_at: datetime = Field(default_factory=now)
