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
"""Data access facade: read-through caching over the primary store.

Every read and write in the application goes through :class:`DataAccessFacade`.
On each call it asks the :class:`AvailabilityProber` which backends answer and
picks a cache:

=================  ==============================
classification     cache used
=================  ==============================
``both``           Redis
``cache-only``     Redis
``store-only``     store-backed emulation
``none``           no cache, straight to the store
=================  ==============================

Failure policy:

- Store errors propagate as :class:`StoreUnavailableException` (or
  :class:`ConflictException` for a duplicate unique field).
- Cache errors never propagate. A failed or corrupt read is a miss, a failed
  population or invalidation is logged at WARNING and dropped.

Cache and store are not kept strongly consistent. A cached value may lag the
store until its TTL runs out or its key is invalidated by a write.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Any, TypeVar

import structlog

from mvnodesk.cache import keys
from mvnodesk.cache.adapters.store_backed import StoreBackedCache
from mvnodesk.cache.codec import decode, encode
from mvnodesk.cache.invalidation import keys_to_invalidate
from mvnodesk.cache.ports.outbound import CacheAdapter
from mvnodesk.health.prober import Availability, AvailabilityProber, HealthSnapshot
from mvnodesk.kernel.exceptions import (
    CacheSerializationException,
    InfrastructureException,
    UnsupportedCacheOperationException,
    ValidationException,
)
from mvnodesk.logging.structlog_adapter import bind_cache_backend
from mvnodesk.query.entity_query import EntityQuery, QueryOptions
from mvnodesk.store.ports.outbound import StorePort

T = TypeVar("T")

logger = structlog.get_logger(__name__)

# Failures a cache call may raise that are intentionally treated as misses or
# logged no-ops. OSError covers socket errors from clients that do not wrap them.
_CACHE_FAILURES: tuple[type[BaseException], ...] = (InfrastructureException, OSError)

Ttl = int | float | timedelta | None


class CacheBackend(StrEnum):
    REDIS = "redis"
    STORE = "store"
    NONE = "none"


@dataclass(frozen=True)
class CacheClearResult:
    """Outcome of a bulk cache clear. ``warning`` explains a refusal."""

    cleared: bool
    backend: CacheBackend
    warning: str | None = None
    removed: int | None = None


class DataAccessFacade:
    """Single entry point for reads and writes, hiding which cache is live.

    Args:
        store: The primary store, the source of truth.
        prober: Classifies store and cache availability per call.
        cache: The Redis adapter, or ``None`` when no cache is configured.
        fallback_cache: Cache used while Redis is down. Defaults to a
            :class:`StoreBackedCache` over ``store``.
        default_ttl: TTL applied when a call passes none.
    """

    def __init__(
        self,
        store: StorePort,
        prober: AvailabilityProber,
        cache: CacheAdapter | None = None,
        fallback_cache: CacheAdapter | None = None,
        *,
        default_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._store = store
        self._prober = prober
        self._cache = cache
        self._fallback = fallback_cache if fallback_cache is not None else StoreBackedCache(store)
        self._default_ttl = default_ttl

    @property
    def store(self) -> StorePort:
        return self._store

    # ------------------------------------------------------------------
    # Backend selection
    # ------------------------------------------------------------------

    def _select(self, availability: Availability) -> tuple[CacheBackend, CacheAdapter | None]:
        if availability.cache_healthy and self._cache is not None:
            return CacheBackend.REDIS, self._cache
        if availability.store_healthy:
            return CacheBackend.STORE, self._fallback
        return CacheBackend.NONE, None

    async def active_backend(self) -> CacheBackend:
        backend, _ = self._select(await self._prober.classify())
        return backend

    async def _resolve(self) -> tuple[CacheBackend, CacheAdapter | None]:
        return self._select(await self._prober.classify())

    def _ttl(self, ttl: Ttl) -> timedelta:
        if ttl is None:
            return self._default_ttl
        if isinstance(ttl, timedelta):
            return ttl
        return timedelta(seconds=ttl)

    # ------------------------------------------------------------------
    # Guarded cache calls
    # ------------------------------------------------------------------

    async def _cache_get(self, cache: CacheAdapter, key: str) -> Any | None:
        try:
            return await cache.get(key)
        except CacheSerializationException as exc:
            logger.warning("cache_payload_corrupt", key=key, error=str(exc))
            await self._cache_evict(cache, key)
            return None
        except _CACHE_FAILURES as exc:
            logger.warning("cache_get_failed", key=key, error=str(exc))
            return None

    async def _cache_put(self, cache: CacheAdapter, key: str, value: Any, ttl: timedelta) -> None:
        try:
            await cache.put(key, value, ttl=ttl)
        except _CACHE_FAILURES as exc:
            logger.warning("cache_put_failed", key=key, error=str(exc))

    async def _cache_evict(self, cache: CacheAdapter, key: str) -> None:
        try:
            await cache.evict(key)
        except _CACHE_FAILURES as exc:
            logger.warning("cache_evict_failed", key=key, error=str(exc))

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def get_cached(self, key: str, loader: Callable[[], Awaitable[T]], ttl: Ttl = None) -> T:
        """Return the cached value for *key*, or load, cache and return it.

        The loaded value is returned in its cached form (datetimes as ISO
        strings, models as plain dicts), so a hit and a miss give equal
        results. A ``None`` from the loader is returned but not cached. Loader
        errors propagate unchanged.
        """
        backend, cache = await self._resolve()
        with bind_cache_backend(backend):
            if cache is not None:
                cached = await self._cache_get(cache, key)
                if cached is not None:
                    logger.debug("cache_hit", key=key)
                    return cached  # type: ignore[no-any-return]

            value = await loader()
            if value is None:
                return value
            try:
                value = decode(encode(value), key)
            except CacheSerializationException as exc:
                logger.warning("cache_value_unserializable", key=key, error=str(exc))
                return value
            if cache is not None:
                await self._cache_put(cache, key, value, self._ttl(ttl))
            return value

    async def get_entity(self, collection: str, id: str, ttl: Ttl = None) -> dict[str, Any] | None:
        """Read-through lookup of one document under ``<entity>:<id>``."""
        return await self.get_cached(
            keys.entity_key(collection, id),
            lambda: self._store.find_by_id(collection, id),
            ttl,
        )

    async def query_entities(
        self,
        collection: str,
        filter: dict[str, Any] | EntityQuery | None = None,
        options: QueryOptions | None = None,
        *,
        use_cache: bool = False,
        ttl: Ttl = None,
    ) -> list[dict[str, Any]]:
        """Documents of *collection* matching *filter*.

        With ``use_cache`` the result list is cached under the canonical
        filter key. Such keys are not invalidated by writes and expire by TTL.
        """
        if isinstance(filter, EntityQuery):
            if filter.collection != collection:
                raise ValidationException(
                    f"Query for '{filter.collection}' used against '{collection}'",
                    code="QUERY_COLLECTION_MISMATCH",
                )
            filter = filter.to_filter()

        async def load() -> list[dict[str, Any]]:
            return await self._store.find(collection, filter, options)

        if not use_cache:
            return await load()
        return await self.get_cached(keys.collection_key(collection, filter, options), load, ttl)

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    async def invalidate(self, key: str) -> None:
        """Drop *key* from every reachable cache. Never raises."""
        await self.invalidate_many([key])

    async def invalidate_many(self, cache_keys: Iterable[str]) -> None:
        targets = list(dict.fromkeys(cache_keys))
        if not targets:
            return
        availability = await self._prober.classify()
        caches: list[CacheAdapter] = []
        if availability.cache_healthy and self._cache is not None:
            caches.append(self._cache)
        # Entries written while Redis was down live on in the store-backed cache.
        if availability.store_healthy:
            caches.append(self._fallback)
        for cache in caches:
            for key in targets:
                await self._cache_evict(cache, key)
        logger.debug("cache_invalidated", keys=targets)

    async def invalidate_all(self) -> CacheClearResult:
        """Clear the active cache.

        With the store-backed cache active this is refused with a warning
        rather than silently doing nothing.
        """
        backend, cache = await self._resolve()
        if cache is None:
            warning = "No cache backend is reachable; nothing was cleared"
            logger.warning("cache_clear_skipped", backend=str(backend), reason=warning)
            return CacheClearResult(cleared=False, backend=backend, warning=warning)
        try:
            await cache.clear()
        except UnsupportedCacheOperationException as exc:
            logger.warning("cache_clear_unsupported", backend=str(backend), reason=str(exc))
            return CacheClearResult(cleared=False, backend=backend, warning=str(exc))
        except _CACHE_FAILURES as exc:
            logger.warning("cache_clear_failed", backend=str(backend), error=str(exc))
            return CacheClearResult(cleared=False, backend=backend, warning=f"Cache clear failed: {exc}")
        return CacheClearResult(cleared=True, backend=backend)

    async def invalidate_pattern(self, pattern: str) -> CacheClearResult:
        """Drop every key matching a glob *pattern*. Redis only."""
        backend, cache = await self._resolve()
        evict_pattern = getattr(cache, "evict_pattern", None)
        if evict_pattern is None:
            warning = f"Pattern invalidation is not supported by the '{backend}' cache backend"
            logger.warning("cache_pattern_unsupported", backend=str(backend), pattern=pattern)
            return CacheClearResult(cleared=False, backend=backend, warning=warning)
        try:
            removed = await evict_pattern(pattern)
        except _CACHE_FAILURES as exc:
            logger.warning("cache_pattern_failed", pattern=pattern, error=str(exc))
            return CacheClearResult(cleared=False, backend=backend, warning=f"Pattern invalidation failed: {exc}")
        return CacheClearResult(cleared=True, backend=backend, removed=removed)

    async def create_entity(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert *document* and return it with its generated ``id``."""
        created = await self._store.insert(collection, document)
        await self.invalidate_many(keys_to_invalidate(collection, created["id"], created))
        logger.info("entity_created", collection=collection, id=created["id"])
        return created

    async def write_entity(
        self,
        collection: str,
        id: str,
        patch: dict[str, Any],
        *,
        extra_keys: Iterable[str] = (),
    ) -> bool:
        """Apply *patch* to one document, then drop the keys it made stale.

        Returns ``False`` when no document has that id. Invalidation failures
        do not change the result.
        """
        updated = await self._store.update_by_id(collection, id, patch)
        if updated:
            await self.invalidate_many([*keys_to_invalidate(collection, id, patch), *extra_keys])
        return updated

    async def increment_field(
        self,
        collection: str,
        id: str,
        field: str,
        amount: float,
        *,
        extra_keys: Iterable[str] = (),
    ) -> bool:
        updated = await self._store.increment(collection, id, field, amount)
        if updated:
            await self.invalidate_many([*keys_to_invalidate(collection, id), *extra_keys])
        return updated

    async def append_to(
        self,
        collection: str,
        id: str,
        field: str,
        item: Any,
        *,
        extra_keys: Iterable[str] = (),
    ) -> bool:
        """Append *item* to the array *field* of one document."""
        updated = await self._store.push(collection, id, field, item)
        if updated:
            await self.invalidate_many([*keys_to_invalidate(collection, id), *extra_keys])
        return updated

    async def delete_entity(
        self,
        collection: str,
        id: str,
        *,
        extra_keys: Iterable[str] = (),
    ) -> bool:
        deleted = await self._store.delete_by_id(collection, id)
        if deleted:
            await self.invalidate_many([*keys_to_invalidate(collection, id), *extra_keys])
            logger.info("entity_deleted", collection=collection, id=id)
        return deleted

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    async def probe_health(self) -> HealthSnapshot:
        return await self._prober.probe_health()

    async def cache_stats(self) -> dict[str, Any]:
        backend, cache = await self._resolve()
        if cache is None:
            return {"backend": str(backend)}
        try:
            return await cache.stats()
        except _CACHE_FAILURES as exc:
            logger.warning("cache_stats_failed", backend=str(backend), error=str(exc))
            return {"backend": str(backend), "error": str(exc)}
