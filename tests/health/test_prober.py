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
"""Tests for the health indicators and the availability prober."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from mvnodesk.cache.adapters.redis import RedisCacheAdapter
from mvnodesk.health.health import CacheHealthIndicator, HealthResult, HealthStatus, StoreHealthIndicator
from mvnodesk.health.prober import Availability, AvailabilityProber
from mvnodesk.kernel.exceptions import StoreUnavailableException


class PingableStore:
    def __init__(self, error: Exception | None = None, delay: float = 0.0) -> None:
        self.error = error
        self.delay = delay

    async def ping(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


class FailingPingRedis:
    async def ping(self) -> Any:
        raise OSError("connection refused")


class Monotonic:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestIndicators:
    @pytest.mark.asyncio
    async def test_store_up(self):
        assert (await StoreHealthIndicator(PingableStore()).health()).is_up

    @pytest.mark.asyncio
    async def test_store_error_is_down(self):
        indicator = StoreHealthIndicator(PingableStore(StoreUnavailableException("no primary")))

        status = await indicator.health()

        assert status.status == "DOWN"
        assert "no primary" in status.details["error"]

    @pytest.mark.asyncio
    async def test_slow_store_is_down(self):
        status = await StoreHealthIndicator(PingableStore(delay=1), timeout=0.01).health()

        assert status.status == "DOWN"

    @pytest.mark.asyncio
    async def test_cache_up(self, fake_redis):
        assert (await CacheHealthIndicator(RedisCacheAdapter(fake_redis)).health()).is_up

    @pytest.mark.asyncio
    async def test_cache_error_is_down(self):
        status = await CacheHealthIndicator(RedisCacheAdapter(FailingPingRedis())).health()

        assert status.status == "DOWN"

    @pytest.mark.asyncio
    async def test_missing_cache_is_down(self):
        status = await CacheHealthIndicator(None).health()

        assert status == HealthStatus(status="DOWN", details={"reason": "cache not configured"})


class TestAvailability:
    @pytest.mark.parametrize(
        ("cache", "store", "expected"),
        [
            (True, True, Availability.BOTH),
            (True, False, Availability.CACHE_ONLY),
            (False, True, Availability.STORE_ONLY),
            (False, False, Availability.NONE),
        ],
    )
    def test_of(self, cache, store, expected):
        availability = Availability.of(cache_healthy=cache, store_healthy=store)

        assert availability is expected
        assert availability.cache_healthy is cache
        assert availability.store_healthy is store

    def test_wire_values(self):
        assert [a.value for a in Availability] == ["cache-only", "store-only", "both", "none"]


class TestAvailabilityProber:
    @pytest.mark.asyncio
    async def test_classify_follows_indicators(self, prober, store_indicator, cache_indicator):
        assert await prober.classify() is Availability.BOTH

        cache_indicator.up = False
        assert await prober.classify() is Availability.STORE_ONLY

        store_indicator.up = False
        assert await prober.classify() is Availability.NONE

    @pytest.mark.asyncio
    async def test_probe_health_snapshot(self, prober, store_indicator):
        store_indicator.up = False

        snapshot = await prober.probe_health()

        assert snapshot.cache_healthy is True
        assert snapshot.store_healthy is False

    @pytest.mark.asyncio
    async def test_probes_run_concurrently(self):
        started: list[str] = []

        class SlowIndicator:
            def __init__(self, name: str) -> None:
                self.name = name

            async def health(self) -> HealthStatus:
                started.append(self.name)
                await asyncio.sleep(0.2)
                return HealthStatus(status="UP")

        prober = AvailabilityProber(SlowIndicator("store"), SlowIndicator("cache"))

        await asyncio.wait_for(prober.classify(), timeout=0.35)
        assert sorted(started) == ["cache", "store"]

    @pytest.mark.asyncio
    async def test_memoized_within_window(self, store_indicator, cache_indicator):
        monotonic = Monotonic()
        prober = AvailabilityProber(store_indicator, cache_indicator, memo_seconds=5, monotonic=monotonic)

        await prober.classify()
        cache_indicator.up = False
        monotonic.now += 4
        assert await prober.classify() is Availability.BOTH
        assert cache_indicator.calls == 1

        monotonic.now += 1
        assert await prober.classify() is Availability.STORE_ONLY
        assert cache_indicator.calls == 2

    @pytest.mark.asyncio
    async def test_reset_forgets_memo(self, store_indicator, cache_indicator):
        prober = AvailabilityProber(store_indicator, cache_indicator, memo_seconds=60)
        await prober.classify()
        cache_indicator.up = False

        prober.reset()

        assert await prober.classify() is Availability.STORE_ONLY

    @pytest.mark.asyncio
    async def test_no_memo_by_default(self, prober, cache_indicator):
        await prober.classify()
        await prober.classify()

        assert cache_indicator.calls == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("store_up", "cache_up", "expected"),
        [(True, True, "UP"), (True, False, "DEGRADED"), (False, True, "DOWN"), (False, False, "DOWN")],
    )
    async def test_health_rollup(self, prober, store_indicator, cache_indicator, store_up, cache_up, expected):
        store_indicator.up = store_up
        cache_indicator.up = cache_up

        result = await prober.health()

        assert isinstance(result, HealthResult)
        assert result.status == expected
        assert set(result.to_dict()["components"]) == {"store", "cache"}
