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
"""Tests for RedisCacheAdapter using a FakeRedis stub."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mvnodesk.cache.adapters.redis import RedisCacheAdapter
from mvnodesk.cache.ports.outbound import CacheAdapter
from mvnodesk.kernel.exceptions import CacheSerializationException, CacheUnavailableException


class UnreachableRedis:
    async def get(self, key: str) -> Any:
        raise RedisConnectionError("connection refused")

    async def ping(self) -> Any:
        raise OSError("network unreachable")


class SlowRedis:
    async def get(self, key: str) -> Any:
        await asyncio.sleep(5)


class TestRedisCacheAdapter:
    def test_protocol_compliance(self, fake_redis):
        assert isinstance(RedisCacheAdapter(fake_redis), CacheAdapter)

    @pytest.mark.asyncio
    async def test_put_and_get(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)

        await adapter.put("customer:1", {"name": "Ana", "total_spent": 12.5})

        assert await adapter.get("customer:1") == {"name": "Ana", "total_spent": 12.5}

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, fake_redis):
        assert await RedisCacheAdapter(fake_redis).get("missing") is None

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)
        await adapter.put("k", "v", ttl=timedelta(seconds=30))

        fake_redis.advance(29)
        assert await adapter.get("k") == "v"

        fake_redis.advance(1)
        assert await adapter.get("k") is None

    @pytest.mark.asyncio
    async def test_sub_second_ttl_rounds_up(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)
        await adapter.put("k", "v", ttl=timedelta(milliseconds=200))

        assert fake_redis._expiry["k"] == 1

    @pytest.mark.asyncio
    async def test_evict(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)
        await adapter.put("k", 1)

        assert await adapter.evict("k") is True
        assert await adapter.evict("k") is False

    @pytest.mark.asyncio
    async def test_evict_pattern(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)
        for key in ("sims:all", "sims:warehouse:w1", "sim:1"):
            await adapter.put(key, 1)

        assert await adapter.evict_pattern("sims:*") == 2
        assert await adapter.get("sim:1") == 1
        assert await adapter.evict_pattern("nothing:*") == 0

    @pytest.mark.asyncio
    async def test_clear_and_stats(self, fake_redis):
        adapter = RedisCacheAdapter(fake_redis)
        await adapter.put("a", 1)
        await adapter.put("b", 2)

        assert (await adapter.stats())["keys"] == 2
        await adapter.clear()
        assert await adapter.stats() == {"backend": "redis", "keys": 0, "used_memory": "1.00M"}

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises(self, fake_redis):
        fake_redis._store["k"] = b"\xff\xfe"

        with pytest.raises(CacheSerializationException):
            await RedisCacheAdapter(fake_redis).get("k")

    @pytest.mark.asyncio
    async def test_connection_errors_are_wrapped(self):
        adapter = RedisCacheAdapter(UnreachableRedis())

        with pytest.raises(CacheUnavailableException) as exc_info:
            await adapter.get("k")
        assert exc_info.value.code == "CACHE_UNAVAILABLE"

        with pytest.raises(CacheUnavailableException):
            await adapter.ping()

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self):
        adapter = RedisCacheAdapter(SlowRedis(), command_timeout=0.01)

        with pytest.raises(CacheUnavailableException):
            await adapter.get("k")
