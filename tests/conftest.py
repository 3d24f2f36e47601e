"""Shared pytest fixtures and in-memory stand-ins for Redis and MongoDB."""

import fnmatch
import math
import re
from collections.abc import AsyncIterator
from typing import Any

import pytest
from pymongo.errors import DuplicateKeyError
from redis.exceptions import ConnectionError as RedisConnectionError

from authgate.app import App
from authgate.config import Config
from authgate.core.core import Core, Services
from authgate.core.kv import KeyValueStore

ADMIN_PHONE = "09120000000"
TEST_SECRET = "test-secret-key-for-testing-only-0123456789abcdef"


class FakeClock:
    """Manually advanced time source, seconds."""

    def __init__(self) -> None:
        self.value = 1_700_000_000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeRedis:
    """Subset of redis.asyncio.Redis with TTL expiry driven by FakeClock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.available = True
        self._data: dict[str, tuple[str, float | None]] = {}

    def _check(self) -> None:
        if not self.available:
            raise RedisConnectionError("Connection refused")

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expire_at = entry
        if expire_at is not None and expire_at <= self.clock():
            del self._data[key]
            return None
        return entry

    def peek(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    async def get(self, key: str) -> str | None:
        self._check()
        return self.peek(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self._data[key] = (value, self.clock() + ex if ex is not None else None)
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def ttl(self, key: str) -> int:
        self._check()
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return math.ceil(entry[1] - self.clock())

    async def scan_iter(self, match: str | None = None) -> AsyncIterator[str]:
        self._check()
        for key in list(self._data):
            if self._live(key) is not None and (match is None or fnmatch.fnmatchcase(key, match)):
                yield key

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        pass


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    for field, condition in query.items():
        if field == "$or":
            if not any(_matches(document, sub) for sub in condition):
                return False
        elif isinstance(condition, dict) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not re.search(condition["$regex"], str(document.get(field, "")), flags):
                return False
        elif document.get(field) != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    def sort(self, key: str, direction: int) -> "FakeCursor":
        self._documents.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._documents = self._documents[:count]
        return self

    async def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        for document in self._documents:
            yield dict(document)


class FakeCollection:
    """Subset of AsyncCollection: equality, $or and $regex queries, $set updates, unique indexes."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self._unique: list[str] = []

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        if unique:
            self._unique.extend(field for field, _ in keys)
        return "_".join(field for field, _ in keys)

    def _check_unique(self, candidate: dict[str, Any], skip: dict[str, Any] | None = None) -> None:
        for field in ["_id", *self._unique]:
            for document in self.documents:
                if document is not skip and field in candidate and document.get(field) == candidate[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error dup key: {{ {field} }}")

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((dict(d) for d in self.documents if _matches(d, query)), None)

    def find(self, query: dict[str, Any]) -> FakeCursor:
        return FakeCursor([d for d in self.documents if _matches(d, query)])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for d in self.documents if _matches(d, query))

    async def insert_one(self, document: dict[str, Any]) -> None:
        self._check_unique(document)
        self.documents.append(dict(document))

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> None:
        await self.find_one_and_update(query, update)

    async def find_one_and_update(self, query: dict[str, Any], update: dict[str, Any], **_: Any) -> dict[str, Any] | None:
        for document in self.documents:
            if _matches(document, query):
                self._check_unique({**document, **update["$set"]}, skip=document)
                document.update(update["$set"])
                return dict(document)
        return None

    async def delete_one(self, query: dict[str, Any]) -> None:
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return


class FakeDatabase:
    def __init__(self) -> None:
        self._collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


class FakeMongoClient:
    async def aclose(self) -> None:
        pass


@pytest.fixture
def config():
    return Config(
        database_url="mongodb://localhost:27017/authgate_test",
        host="127.0.0.1",
        port=8000,
        jwt_secret=TEST_SECRET,
        admin_phone=ADMIN_PHONE,
        _env_file=None,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def redis_client(clock):
    return FakeRedis(clock)


@pytest.fixture
def core(config, redis_client):
    """Core wired to in-memory stores. Services are not started."""
    core = Core(config)
    core.mongo_client = FakeMongoClient()
    core.database = FakeDatabase()
    core.kv = KeyValueStore(redis_client)
    core.services = Services(core.database)
    core.services.set_core(core)
    return core


@pytest.fixture
async def started_core(core):
    """Core with indexes created and the admin account bootstrapped."""
    await core.services.start_all()
    return core


@pytest.fixture
def app(config, core):
    app = App(config)
    app._core = core
    return app


@pytest.fixture
async def admin(started_core):
    return await started_core.services.user.find_user_by_phone(ADMIN_PHONE)


@pytest.fixture
async def admin_token(started_core, admin):
    return await started_core.services.session.create_session(admin.id)
