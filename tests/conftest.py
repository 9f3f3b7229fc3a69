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
"""Shared fixtures: in-memory Mongo, a FakeRedis stub, a settable clock."""

from __future__ import annotations

import fnmatch
from datetime import datetime, timedelta
from typing import Any

import pytest

from mvnodesk.health.health import HealthStatus


class FakeClock:
    """Settable naive-UTC clock for the store and store-backed cache."""

    def __init__(self, start: datetime = datetime(2099, 1, 1, 12, 0, 0)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeRedis:
    """Minimal in-memory stub matching the redis.asyncio.Redis interface.

    Expiry follows ``self.time``, which tests move forward with ``advance``.
    """

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}
        self._expiry: dict[str, float] = {}
        self.time = 0.0
        self.calls: list[str] = []

    def advance(self, seconds: float) -> None:
        self.time += seconds

    def _alive(self, key: str) -> bool:
        expires = self._expiry.get(key)
        if expires is not None and self.time >= expires:
            self._store.pop(key, None)
            self._expiry.pop(key, None)
        return key in self._store

    async def get(self, key: str) -> bytes | None:
        self.calls.append("get")
        return self._store[key] if self._alive(key) else None

    async def set(self, key: str, value: bytes, ex: int | None = None) -> None:
        self.calls.append("set")
        self._store[key] = value
        if ex is not None:
            self._expiry[key] = self.time + ex
        else:
            self._expiry.pop(key, None)

    async def delete(self, *keys: str) -> int:
        self.calls.append("delete")
        count = 0
        for k in keys:
            if self._alive(k):
                del self._store[k]
                self._expiry.pop(k, None)
                count += 1
        return count

    async def scan_iter(self, match: str = "*", count: int = 100) -> Any:
        for key in list(self._store):
            if self._alive(key) and fnmatch.fnmatchcase(key, match):
                yield key.encode()

    async def flushdb(self) -> None:
        self._store.clear()
        self._expiry.clear()

    async def ping(self) -> bool:
        return True

    async def dbsize(self) -> int:
        return sum(1 for k in list(self._store) if self._alive(k))

    async def info(self, section: str | None = None) -> dict[str, Any]:
        return {"used_memory_human": "1.00M"}

    async def aclose(self) -> None:
        pass


class StaticIndicator:
    """Health indicator with a switchable answer."""

    def __init__(self, up: bool = True) -> None:
        self.up = up
        self.calls = 0

    async def health(self) -> HealthStatus:
        self.calls += 1
        return HealthStatus(status="UP" if self.up else "DOWN")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def mongo_client():
    mongomock_motor = pytest.importorskip("mongomock_motor", reason="mongomock-motor not installed")
    client = mongomock_motor.AsyncMongoMockClient()
    yield client
    client.close()


@pytest.fixture
def mongo_db(mongo_client):
    return mongo_client["mvnodesk_test"]


@pytest.fixture
def store(mongo_client, mongo_db, clock):
    from mvnodesk.store.adapters.mongodb import MongoStoreAdapter

    return MongoStoreAdapter(mongo_client, mongo_db, clock=clock)


@pytest.fixture
def store_indicator() -> StaticIndicator:
    return StaticIndicator()


@pytest.fixture
def cache_indicator() -> StaticIndicator:
    return StaticIndicator()


@pytest.fixture
def prober(store_indicator, cache_indicator):
    from mvnodesk.health.prober import AvailabilityProber

    return AvailabilityProber(store_indicator, cache_indicator)


@pytest.fixture
def redis_cache(fake_redis):
    from mvnodesk.cache.adapters.redis import RedisCacheAdapter

    return RedisCacheAdapter(fake_redis)


@pytest.fixture
def fallback_cache(store, clock):
    from mvnodesk.cache.adapters.store_backed import StoreBackedCache

    return StoreBackedCache(store, clock=clock)


@pytest.fixture
def facade(store, prober, redis_cache, fallback_cache):
    """Facade over in-memory Mongo and FakeRedis; flip the indicators to degrade it."""
    from mvnodesk.access.facade import DataAccessFacade

    return DataAccessFacade(store, prober, redis_cache, fallback_cache)
