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
"""Cache emulation on top of the primary store.

Used when Redis cannot be reached. Each entry is one document in the
``cache`` collection::

    {"key": "customer:42", "value": "<json>", "expires_at": datetime | None}

Readers filter on ``expires_at``, so an expired entry is invisible at once
even though it stays in the collection until a later ``put`` overwrites it,
the TTL index removes it, or :meth:`StoreBackedCache.purge_expired` runs.
"""

from __future__ import annotations

from collections.abc import Awaitable
from datetime import timedelta
from typing import Any, TypeVar

import structlog

from mvnodesk.cache.codec import decode, encode
from mvnodesk.core.clock import Clock, utcnow
from mvnodesk.kernel.exceptions import (
    CacheUnavailableException,
    MvnoDeskException,
    UnsupportedCacheOperationException,
)
from mvnodesk.store.collections import Collection
from mvnodesk.store.ports.outbound import StorePort

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class StoreBackedCache:
    """Degraded cache backend storing entries in a store collection.

    There is no bulk clear: :meth:`clear` raises
    :class:`UnsupportedCacheOperationException` instead of pretending to
    succeed. Every other failure of the underlying store is raised as
    :class:`CacheUnavailableException`, the same as the Redis adapter.
    """

    def __init__(
        self,
        store: StorePort,
        *,
        collection: str = Collection.CACHE,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._collection = str(collection)
        self._clock = clock

    def _live(self, key: str) -> dict[str, Any]:
        return {
            "key": key,
            "$or": [{"expires_at": None}, {"expires_at": {"$gt": self._clock()}}],
        }

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        # Store errors of any kind, a racing upsert's duplicate key included,
        # surface as a cache failure.
        try:
            return await awaitable
        except MvnoDeskException as exc:
            raise CacheUnavailableException(
                f"Store-backed cache {operation} failed: {exc}",
                code="CACHE_UNAVAILABLE",
                context={"backend": "store", "operation": operation, "cause": exc.code},
            ) from exc

    async def get(self, key: str) -> Any | None:
        doc = await self._call("get", self._store.find_one(self._collection, self._live(key)))
        if doc is None:
            return None
        return decode(doc["value"], key)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        now = self._clock()
        expires_at = now + ttl if ttl is not None and ttl.total_seconds() > 0 else None
        payload = encode(value)
        await self._call(
            "put",
            self._store.upsert(
                self._collection,
                {"key": key},
                {"key": key, "value": payload, "expires_at": expires_at, "updated_at": now},
            ),
        )

    async def evict(self, key: str) -> bool:
        return await self._call("evict", self._store.delete_one(self._collection, {"key": key}))

    async def clear(self) -> None:
        raise UnsupportedCacheOperationException(
            "Bulk cache clear is not supported while the cache is emulated in the store",
            code="CACHE_CLEAR_UNSUPPORTED",
            context={"backend": "store"},
        )

    async def ping(self) -> None:
        await self._call("ping", self._store.ping())

    async def purge_expired(self) -> int:
        """Physically delete entries whose expiry has passed."""
        removed = await self._call(
            "purge", self._store.delete_many(self._collection, {"expires_at": {"$lte": self._clock()}})
        )
        if removed:
            logger.debug("cache_expired_purged", backend="store", removed=removed)
        return removed

    async def stats(self) -> dict[str, Any]:
        now = self._clock()
        total = await self._call("stats", self._store.count(self._collection))
        expired = await self._call("stats", self._store.count(self._collection, {"expires_at": {"$lte": now}}))
        return {"backend": "store", "keys": total - expired, "expired": expired}
