from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from authgate.core.core import Service
from authgate.core.modules.ban.models import Ban
from authgate.core.pagination import PaginationResult
from authgate.errors import ConflictError, NotFoundError

logger = structlog.get_logger(__name__)


class BanService(Service):
    """Ban records keyed by phone."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("bans")

    async def on_start(self) -> None:
        await self._collection.create_index([("phone", 1)], unique=True)
        await self._collection.create_index([("user_id", 1)])

    async def is_phone_banned(self, phone: str) -> bool:
        return await self._collection.find_one({"phone": phone}) is not None

    async def get_ban(self, ban_id: UUID) -> Ban:
        ban = Ban.from_mongo(await self._collection.find_one({"_id": ban_id}))
        if ban is None:
            raise NotFoundError("Ban not found")
        return ban

    async def create_ban(self, phone: str, user_id: UUID) -> Ban:
        ban = Ban(phone=phone, user_id=user_id)
        try:
            await self._collection.insert_one(ban.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError("This phone is already banned") from e
        logger.info("ban_created", ban_id=str(ban.id), user_id=str(user_id))
        return ban

    async def delete_ban(self, ban_id: UUID) -> None:
        await self._collection.delete_one({"_id": ban_id})
        logger.info("ban_deleted", ban_id=str(ban_id))

    async def list_bans(self, limit: int = 50, offset: int = 0) -> PaginationResult[Ban]:
        """Get paginated bans, newest first."""
        total = await self._collection.count_documents({})
        cursor = self._collection.find({}).sort("created_at", -1).skip(offset).limit(limit)
        items = await Ban.list_cursor(cursor)
        return PaginationResult(items=items, total=total, limit=limit, offset=offset)
