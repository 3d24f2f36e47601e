"""Key-value store client for short-lived authentication state."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as aioredis
import structlog
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from authgate.errors import TransientStoreError

logger = structlog.get_logger(__name__)

# TTL replies for keys that are missing or have no expiry
TTL_MISSING = -2
TTL_PERSISTENT = -1


class KeyValueStore:
    """Thin Redis wrapper with TTL semantics.

    Network failures surface as TransientStoreError so callers never mistake
    an unreachable store for an absent key.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, timeout: float = 5.0) -> "KeyValueStore":
        client = aioredis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    @asynccontextmanager
    async def _guard(self, op: str, key: str) -> AsyncGenerator[None]:
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            logger.warning("kv_unavailable", op=op, key=key, error=str(e))
            raise TransientStoreError(f"Key-value store unavailable during {op}") from e

    async def get(self, key: str) -> str | None:
        async with self._guard("get", key):
            return await self._client.get(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        """Write value with an expiry in seconds, replacing any previous value and TTL."""
        async with self._guard("set", key):
            await self._client.set(key, value, ex=ttl)

    async def delete(self, key: str) -> bool:
        """Delete key, return True if this call removed it."""
        async with self._guard("delete", key):
            return bool(await self._client.delete(key))

    async def ttl(self, key: str) -> int:
        """Remaining lifetime in seconds, 0 if the key is missing or never expires."""
        async with self._guard("ttl", key):
            remaining = int(await self._client.ttl(key))
        if remaining in (TTL_MISSING, TTL_PERSISTENT):
            return 0
        return max(remaining, 0)

    async def scan(self, pattern: str) -> list[str]:
        """Collect every key matching a glob pattern with cursor-based SCAN."""
        async with self._guard("scan", pattern):
            return [key async for key in self._client.scan_iter(match=pattern)]

    async def ping(self) -> bool:
        async with self._guard("ping", ""):
            return bool(await self._client.ping())

    async def aclose(self) -> None:
        await self._client.aclose()
