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
"""Health indicator protocol, status dataclasses, and the store/cache indicators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import structlog

from mvnodesk.cache.ports.outbound import CacheAdapter
from mvnodesk.resilience.time_limiter import run_with_timeout
from mvnodesk.store.ports.outbound import StorePort

logger = structlog.get_logger(__name__)

UP = "UP"
DOWN = "DOWN"
DEGRADED = "DEGRADED"


@dataclass
class HealthStatus:
    """Health status for a single component."""

    status: str  # "UP", "DOWN", "DEGRADED"
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_up(self) -> bool:
        return self.status == UP


@dataclass
class HealthResult:
    """Aggregated health result across all components."""

    status: str
    components: dict[str, HealthStatus] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        result: dict[str, Any] = {"status": self.status}
        if self.components:
            result["components"] = {
                name: {"status": hs.status, "details": hs.details}
                for name, hs in self.components.items()
            }
        return result


@runtime_checkable
class HealthIndicator(Protocol):
    async def health(self) -> HealthStatus: ...


class StoreHealthIndicator:
    """Administrative ping against the primary store."""

    def __init__(self, store: StorePort, *, timeout: float | None = 2.0) -> None:
        self._store = store
        self._timeout = timeout

    async def health(self) -> HealthStatus:
        try:
            await run_with_timeout(self._store.ping(), self._timeout, "store.ping")
        except Exception as exc:
            logger.warning("store_ping_failed", error=str(exc))
            return HealthStatus(status=DOWN, details={"error": str(exc)})
        return HealthStatus(status=UP)


class CacheHealthIndicator:
    """PING against the ephemeral cache. An absent cache is reported DOWN."""

    def __init__(self, cache: CacheAdapter | None, *, timeout: float | None = 2.0) -> None:
        self._cache = cache
        self._timeout = timeout

    async def health(self) -> HealthStatus:
        if self._cache is None:
            return HealthStatus(status=DOWN, details={"reason": "cache not configured"})
        try:
            await run_with_timeout(self._cache.ping(), self._timeout, "cache.ping")
        except Exception as exc:
            logger.warning("cache_ping_failed", error=str(exc))
            return HealthStatus(status=DOWN, details={"error": str(exc)})
        return HealthStatus(status=UP)
