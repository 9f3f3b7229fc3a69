# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Redis-backed cache adapter."""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import timedelta
from typing import Any, TypeVar, cast

import structlog
from redis.exceptions import RedisError

from mvnodesk.cache.codec import decode, encode
from mvnodesk.kernel.exceptions import CacheUnavailableException, OperationTimeoutException
from mvnodesk.resilience.time_limiter import run_with_timeout

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class RedisCacheAdapter:
    """Cache adapter that delegates to a ``redis.asyncio.Redis``-like client.

    Values are JSON-serialized before storage. Every command is bounded by
    ``command_timeout``; connection errors and timeouts are raised as
    :class:`CacheUnavailableException` and a corrupt payload as
    :class:`CacheSerializationException`, for the facade to turn into misses.
    """

    def __init__(self, client: Any, *, command_timeout: float | None = None) -> None:
        self._client = client
        self._timeout = command_timeout

    async def _call(self, command: str, awaitable: Awaitable[T]) -> T:
        try:
            return await run_with_timeout(awaitable, self._timeout, f"cache.{command}")
        except (RedisError, OSError, OperationTimeoutException) as exc:
            raise CacheUnavailableException(
                f"Redis {command} failed: {exc}",
                code="CACHE_UNAVAILABLE",
                context={"command": command},
            ) from exc

    async def get(self, key: str) -> Any | None:
        """Retrieve and deserialize a cached value."""
        raw = await self._call("get", self._client.get(key))
        if raw is None:
            return None
        return decode(raw, key)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Serialize and store a value with optional TTL."""
        raw = encode(value)
        ex = max(1, int(ttl.total_seconds())) if ttl is not None and ttl.total_seconds() > 0 else None
        await self._call("set", self._client.set(key, raw.encode(), ex=ex))

    async def evict(self, key: str) -> bool:
        """Remove a key. Returns True if the key existed."""
        count = await self._call("delete", self._client.delete(key))
        return cast(bool, count > 0)

    async def evict_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob *pattern* (SCAN, then DEL)."""
        keys = await self._call("scan", self._scan(pattern))
        if not keys:
            return 0
        return cast(int, await self._call("delete", self._client.delete(*keys)))

    async def _scan(self, pattern: str) -> list[str]:
        keys: list[str] = []
        async for key in self._client.scan_iter(match=pattern, count=100):
            keys.append(key.decode() if isinstance(key, bytes) else key)
        return keys

    async def clear(self) -> None:
        """Flush the entire database."""
        await self._call("flushdb", self._client.flushdb())
        logger.info("cache_cleared", backend="redis")

    async def ping(self) -> None:
        await self._call("ping", self._client.ping())

    async def stats(self) -> dict[str, Any]:
        """Key count and memory figures reported by Redis."""
        dbsize = await self._call("dbsize", self._client.dbsize())
        info = await self._call("info", self._client.info("memory"))
        return {
            "backend": "redis",
            "keys": dbsize,
            "used_memory": info.get("used_memory_human"),
        }

    async def close(self) -> None:
        """Close the underlying Redis connection."""
        await self._client.aclose()
