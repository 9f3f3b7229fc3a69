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
"""Application bootstrap: builds every shared handle once per process.

Startup sequence:
1. Bind store, cache and logging properties from :class:`Config`
2. Configure logging
3. Create the Motor client and, when enabled, the Redis client
4. Wire the cache backends, the availability prober and the facade
5. Build the domain services on top of the facade

:meth:`MvnoDeskApplication.start` then ensures indexes and, when
``sweep_interval_seconds`` is positive, runs a background purge of expired
store-backed cache entries.
"""

from __future__ import annotations

import asyncio
import contextlib
from datetime import timedelta
from typing import Any

import redis.asyncio as aioredis
import structlog
from starlette.applications import Starlette

from mvnodesk.access.facade import DataAccessFacade
from mvnodesk.cache.adapters.redis import RedisCacheAdapter
from mvnodesk.cache.adapters.store_backed import StoreBackedCache
from mvnodesk.config.properties import CacheProperties, LoggingProperties, StoreProperties
from mvnodesk.core.config import Config
from mvnodesk.health.health import CacheHealthIndicator, StoreHealthIndicator
from mvnodesk.health.prober import AvailabilityProber
from mvnodesk.kernel.exceptions import CacheUnavailableException
from mvnodesk.logging.structlog_adapter import StructlogAdapter
from mvnodesk.services import (
    AnalyticsService,
    CustomerService,
    NotificationService,
    PlanService,
    ReportService,
    SimService,
    TicketService,
    TransactionService,
    UserService,
    WarehouseService,
)
from mvnodesk.store.adapters.mongodb import connect_store
from mvnodesk.store.ports.outbound import StorePort
from mvnodesk.web.health import create_health_app

logger = structlog.get_logger(__name__)


class MvnoDeskApplication:
    """Owns the store and cache handles and the services built on them."""

    def __init__(
        self,
        config: Config,
        store: StorePort,
        cache: RedisCacheAdapter | None,
        *,
        cache_properties: CacheProperties | None = None,
    ) -> None:
        self.config = config
        self._cache_properties = cache_properties or CacheProperties()
        props = self._cache_properties
        self.store = store
        self.cache = cache
        self.fallback_cache = StoreBackedCache(store)
        self.prober = AvailabilityProber(
            StoreHealthIndicator(store, timeout=props.probe_timeout_seconds),
            CacheHealthIndicator(cache, timeout=props.probe_timeout_seconds),
            memo_seconds=props.probe_memo_seconds,
        )
        self.facade = DataAccessFacade(
            store,
            self.prober,
            cache,
            self.fallback_cache,
            default_ttl=timedelta(seconds=props.default_ttl_seconds),
        )

        self.notifications = NotificationService(self.facade)
        self.users = UserService(self.facade)
        self.customers = CustomerService(self.facade)
        self.sims = SimService(self.facade)
        self.transactions = TransactionService(self.facade, self.customers, self.sims)
        self.tickets = TicketService(self.facade, self.notifications)
        self.plans = PlanService(self.facade)
        self.warehouses = WarehouseService(self.facade)
        self.analytics = AnalyticsService(self.facade)
        self.reports = ReportService(self.facade)

        self._sweep_task: asyncio.Task[None] | None = None

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        *,
        store: StorePort | None = None,
        redis_client: Any = None,
    ) -> MvnoDeskApplication:
        """Build the application from configuration.

        ``store`` and ``redis_client`` replace the clients that would be
        created from ``mvnodesk.store`` and ``mvnodesk.cache``.
        """
        config = config or Config.defaults()

        logging_adapter = StructlogAdapter()
        logging_adapter.configure(config.bind(LoggingProperties))

        store_props = config.bind(StoreProperties)
        cache_props = config.bind(CacheProperties)

        if store is None:
            store = connect_store(store_props)

        cache: RedisCacheAdapter | None = None
        if cache_props.enabled:
            if redis_client is None:
                redis_client = aioredis.from_url(
                    cache_props.url,
                    socket_connect_timeout=cache_props.probe_timeout_seconds,
                    socket_timeout=cache_props.command_timeout_seconds,
                )
            cache = RedisCacheAdapter(redis_client, command_timeout=cache_props.command_timeout_seconds)
        else:
            logger.info("cache_disabled", reason="mvnodesk.cache.enabled is false")

        return cls(config, store, cache, cache_properties=cache_props)

    def asgi(self) -> Starlette:
        """ASGI app serving ``GET /health``."""
        return create_health_app(self.prober)

    async def start(self) -> None:
        await self.store.ensure_indexes()
        interval = self._cache_properties.sweep_interval_seconds
        if interval > 0 and self._sweep_task is None:
            self._sweep_task = asyncio.create_task(self._sweep(interval))
        availability = await self.prober.classify()
        logger.info("application_started", availability=str(availability))

    async def _sweep(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.fallback_cache.purge_expired()
            except CacheUnavailableException as exc:
                logger.warning("cache_sweep_failed", error=str(exc))

    async def stop(self) -> None:
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweep_task
            self._sweep_task = None
        if self.cache is not None:
            await self.cache.close()
        await self.store.close()
        logger.info("application_stopped")

    async def __aenter__(self) -> MvnoDeskApplication:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()
