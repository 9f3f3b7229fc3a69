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
"""Tests for the store-backed cache emulation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from mvnodesk.cache.adapters.store_backed import StoreBackedCache
from mvnodesk.cache.ports.outbound import CacheAdapter
from mvnodesk.kernel.exceptions import (
    CacheSerializationException,
    CacheUnavailableException,
    ConflictException,
    StoreUnavailableException,
    UnsupportedCacheOperationException,
)
from mvnodesk.store.collections import Collection


class FailingStore:
    """Store stub raising a fixed error from every call."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    async def find_one(self, collection, filter):
        raise self.error

    async def upsert(self, collection, filter, values):
        raise self.error

    async def delete_one(self, collection, filter):
        raise self.error

    async def ping(self):
        raise self.error


class TestStoreBackedCache:
    def test_protocol_compliance(self, fallback_cache):
        assert isinstance(fallback_cache, CacheAdapter)

    @pytest.mark.asyncio
    async def test_put_and_get(self, fallback_cache):
        await fallback_cache.put("customer:1", {"name": "Ana"}, ttl=timedelta(minutes=30))

        assert await fallback_cache.get("customer:1") == {"name": "Ana"}

    @pytest.mark.asyncio
    async def test_put_overwrites(self, fallback_cache, mongo_db):
        await fallback_cache.put("k", 1, ttl=timedelta(minutes=1))
        await fallback_cache.put("k", 2, ttl=timedelta(minutes=1))

        assert await fallback_cache.get("k") == 2
        assert await mongo_db[Collection.CACHE].count_documents({"key": "k"}) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, fallback_cache, clock):
        await fallback_cache.put("k", "v", ttl=timedelta(seconds=60))

        clock.advance(59)
        assert await fallback_cache.get("k") == "v"

        clock.advance(1)
        assert await fallback_cache.get("k") is None

    @pytest.mark.asyncio
    async def test_entry_without_ttl_never_expires(self, fallback_cache, clock):
        await fallback_cache.put("k", "v")

        clock.advance(10 * 365 * 24 * 3600)

        assert await fallback_cache.get("k") == "v"

    @pytest.mark.asyncio
    async def test_evict(self, fallback_cache):
        await fallback_cache.put("k", "v")

        assert await fallback_cache.evict("k") is True
        assert await fallback_cache.evict("k") is False
        assert await fallback_cache.get("k") is None

    @pytest.mark.asyncio
    async def test_clear_is_unsupported(self, fallback_cache):
        with pytest.raises(UnsupportedCacheOperationException) as exc_info:
            await fallback_cache.clear()

        assert exc_info.value.code == "CACHE_CLEAR_UNSUPPORTED"

    @pytest.mark.asyncio
    async def test_purge_expired_and_stats(self, fallback_cache, clock):
        await fallback_cache.put("short", 1, ttl=timedelta(seconds=10))
        await fallback_cache.put("long", 2, ttl=timedelta(hours=1))
        await fallback_cache.put("forever", 3)

        clock.advance(11)
        assert await fallback_cache.stats() == {"backend": "store", "keys": 2, "expired": 1}

        assert await fallback_cache.purge_expired() == 1
        assert await fallback_cache.stats() == {"backend": "store", "keys": 2, "expired": 0}

    @pytest.mark.asyncio
    async def test_corrupt_entry_raises(self, fallback_cache, mongo_db):
        await mongo_db[Collection.CACHE].insert_one({"key": "k", "value": "{bad", "expires_at": None})

        with pytest.raises(CacheSerializationException):
            await fallback_cache.get("k")

    @pytest.mark.asyncio
    async def test_custom_collection(self, store, clock, mongo_db):
        cache = StoreBackedCache(store, collection="side_cache", clock=clock)

        await cache.put("k", "v")

        assert await mongo_db["side_cache"].count_documents({}) == 1


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_duplicate_key_on_put_is_a_cache_failure(self):
        cache = StoreBackedCache(FailingStore(ConflictException("Duplicate key in 'cache'", code="DUPLICATE_KEY")))

        with pytest.raises(CacheUnavailableException) as exc_info:
            await cache.put("customer:42", {"name": "Ana"}, ttl=timedelta(seconds=60))

        assert exc_info.value.context == {"backend": "store", "operation": "put", "cause": "DUPLICATE_KEY"}
        assert isinstance(exc_info.value.__cause__, ConflictException)

    @pytest.mark.asyncio
    async def test_unavailable_store_is_a_cache_failure(self):
        cache = StoreBackedCache(FailingStore(StoreUnavailableException("down", code="STORE_UNAVAILABLE")))

        for call in (cache.get("k"), cache.evict("k"), cache.ping()):
            with pytest.raises(CacheUnavailableException):
                await call
