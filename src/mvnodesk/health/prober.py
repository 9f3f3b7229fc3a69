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
"""Availability prober: which of the cache and the store can answer right now.

The classification is advisory. It can be stale by the time the caller acts
on it, and with ``memo_seconds > 0`` it can be up to that many seconds old.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from mvnodesk.health.health import DEGRADED, DOWN, UP, HealthIndicator, HealthResult, HealthStatus

logger = structlog.get_logger(__name__)


class Availability(StrEnum):
    CACHE_ONLY = "cache-only"
    STORE_ONLY = "store-only"
    BOTH = "both"
    NONE = "none"

    @classmethod
    def of(cls, *, cache_healthy: bool, store_healthy: bool) -> Availability:
        if cache_healthy and store_healthy:
            return cls.BOTH
        if cache_healthy:
            return cls.CACHE_ONLY
        if store_healthy:
            return cls.STORE_ONLY
        return cls.NONE

    @property
    def cache_healthy(self) -> bool:
        return self in (Availability.CACHE_ONLY, Availability.BOTH)

    @property
    def store_healthy(self) -> bool:
        return self in (Availability.STORE_ONLY, Availability.BOTH)


@dataclass(frozen=True)
class HealthSnapshot:
    cache_healthy: bool
    store_healthy: bool

    def to_dict(self) -> dict[str, Any]:
        return {"cache_healthy": self.cache_healthy, "store_healthy": self.store_healthy}


class AvailabilityProber:
    """Pings the store and the cache concurrently and classifies the result.

    Args:
        store_indicator: Health check for the primary store.
        cache_indicator: Health check for the ephemeral cache.
        memo_seconds: Reuse the last classification for this long. ``0``
            re-probes on every call.
        monotonic: Time source for the memo window.
    """

    def __init__(
        self,
        store_indicator: HealthIndicator,
        cache_indicator: HealthIndicator,
        *,
        memo_seconds: float = 0.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store_indicator
        self._cache = cache_indicator
        self._memo_seconds = memo_seconds
        self._monotonic = monotonic
        self._last: tuple[float, HealthStatus, HealthStatus] | None = None

    async def _statuses(self) -> tuple[HealthStatus, HealthStatus]:
        now = self._monotonic()
        if self._memo_seconds > 0 and self._last is not None and now - self._last[0] < self._memo_seconds:
            return self._last[1], self._last[2]
        store_status, cache_status = await asyncio.gather(self._store.health(), self._cache.health())
        self._last = (now, store_status, cache_status)
        return store_status, cache_status

    async def classify(self) -> Availability:
        store_status, cache_status = await self._statuses()
        availability = Availability.of(cache_healthy=cache_status.is_up, store_healthy=store_status.is_up)
        if availability is not Availability.BOTH:
            logger.debug("availability_degraded", availability=str(availability))
        return availability

    async def probe_health(self) -> HealthSnapshot:
        availability = await self.classify()
        return HealthSnapshot(cache_healthy=availability.cache_healthy, store_healthy=availability.store_healthy)

    async def health(self) -> HealthResult:
        """DOWN without the store, DEGRADED without only the cache, else UP."""
        store_status, cache_status = await self._statuses()
        if not store_status.is_up:
            overall = DOWN
        elif not cache_status.is_up:
            overall = DEGRADED
        else:
            overall = UP
        return HealthResult(status=overall, components={"store": store_status, "cache": cache_status})

    def reset(self) -> None:
        """Forget the memoized classification."""
        self._last = None
