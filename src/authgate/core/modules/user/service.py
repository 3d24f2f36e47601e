import re
from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from authgate.core.core import Service
from authgate.core.modules.user.models import Role, User
from authgate.core.modules.user.validators import default_username, validate_password, validate_phone, validate_username
from authgate.core.pagination import PaginationResult
from authgate.errors import ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Manages users in MongoDB.

    Reads always hit the database: ban flags written by one worker must be
    visible to every other worker on the next request.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def find_user(self, user_id: UUID) -> User | None:
        """Get user by ID, or None."""
        return User.from_mongo(await self._collection.find_one({"_id": user_id}))

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID. Raises NotFoundError if missing."""
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def find_user_by_phone(self, phone: str) -> User | None:
        return User.from_mongo(await self._collection.find_one({"phone": phone}))

    async def create_user(self, phone: str, fullname: str = "", role: Role = Role.USER) -> User:
        """Create an OTP-only account for a phone. Username defaults to a phone-derived handle."""
        validate_phone(phone)
        user = User(phone=phone, fullname=fullname, username=default_username(phone), role=role)
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            raise ConflictError("User already exists with this information") from e
        logger.info("user_created", user_id=str(user.id), role=user.role)
        return user

    async def list_users(self, limit: int = 50, offset: int = 0, search: str | None = None) -> PaginationResult[User]:
        """Get paginated non-banned users, newest first, optionally filtered by name."""
        query: dict[str, Any] = {"is_banned": False}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"fullname": pattern}, {"username": pattern}]

        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort("created_at", -1).skip(offset).limit(limit)
        items = await User.list_cursor(cursor)
        return PaginationResult(items=items, total=total, limit=limit, offset=offset)

    async def update_profile(
        self, user_id: UUID, fullname: str | None = None, username: str | None = None, profile: str | None = None
    ) -> User:
        """Partial profile update. Returns the stored user after the write."""
        changes: dict[str, Any] = {}
        if fullname is not None:
            changes["fullname"] = fullname
        if username is not None:
            validate_username(username)
            changes["username"] = username
        if profile is not None:
            changes["profile"] = profile
        if not changes:
            return await self.get_user(user_id)

        try:
            document = await self._collection.find_one_and_update(
                {"_id": user_id}, {"$set": changes}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            raise ConflictError("Username is already taken") from e
        user = User.from_mongo(document)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def change_password(self, user_id: UUID, old_password: str | None, new_password: str) -> None:
        """Set or change password. The current password is required once one exists."""
        user = await self.get_user(user_id)
        if user.password_hash is not None and (
            old_password is None or not bcrypt.checkpw(old_password.encode("utf-8"), user.password_hash.encode("utf-8"))
        ):
            raise ValidationError("Invalid current password")

        validate_password(new_password)
        password_hash = bcrypt.hashpw(new_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        await self._collection.update_one({"_id": user_id}, {"$set": {"password_hash": password_hash}})

    async def set_banned(self, user_id: UUID, is_banned: bool) -> User:
        document = await self._collection.find_one_and_update(
            {"_id": user_id}, {"$set": {"is_banned": is_banned}}, return_document=ReturnDocument.AFTER
        )
        user = User.from_mongo(document)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return user

    async def ensure_admin(self, phone: str) -> None:
        """Create or promote the configured admin account."""
        user = await self.find_user_by_phone(phone)
        if user is None:
            await self.create_user(phone, fullname="Administrator", role=Role.ADMIN)
        elif user.role != Role.ADMIN:
            await self._collection.update_one({"_id": user.id}, {"$set": {"role": Role.ADMIN}})
            logger.info("user_promoted_to_admin", user_id=str(user.id))

    async def on_start(self) -> None:
        """Initialize indexes and admin user."""
        await self._collection.create_index([("phone", 1)], unique=True)
        await self._collection.create_index([("username", 1)], unique=True)
        if self.core.config.admin_phone:
            await self.ensure_admin(self.core.config.admin_phone)
        logger.debug("user_service_started")
