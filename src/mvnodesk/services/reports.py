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
"""Dashboard metrics and cached reports."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from mvnodesk.access.facade import CacheClearResult, DataAccessFacade
from mvnodesk.cache import keys
from mvnodesk.cache.decorators import cacheable
from mvnodesk.domain.models import SimStatus, TicketStatus, TransactionStatus
from mvnodesk.store.collections import Collection

T = TypeVar("T")

SYSTEM_STATS_TTL_SECONDS = 300


class ReportService:
    def __init__(self, facade: DataAccessFacade) -> None:
        self._facade = facade

    @cacheable(lambda self: self._facade, key=keys.SYSTEM_STATS_KEY, ttl=SYSTEM_STATS_TTL_SECONDS)
    async def system_metrics(self) -> dict[str, Any]:
        """Headline counts for the dashboard, cached under ``system:stats``.

        Any entity write drops the key, so the figures lag by at most one
        write or five minutes.
        """
        store = self._facade.store
        revenue_rows = await store.aggregate(
            Collection.TRANSACTIONS,
            [
                {"$match": {"status": TransactionStatus.COMPLETED.value, "amount": {"$gt": 0}}},
                {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
            ],
        )
        return {
            "users": await store.count(Collection.USERS),
            "active_users": await store.count(Collection.USERS, {"is_active": True}),
            "customers": await store.count(Collection.CUSTOMERS),
            "sims": {status.value: await store.count(Collection.SIMS, {"status": status.value}) for status in SimStatus},
            "transactions": await store.count(Collection.TRANSACTIONS),
            "revenue": revenue_rows[0]["total"] if revenue_rows else 0,
            "open_tickets": await store.count(
                Collection.TICKETS,
                {"status": {"$in": [TicketStatus.OPEN.value, TicketStatus.IN_PROGRESS.value]}},
            ),
        }

    async def cached_report(
        self,
        report_type: str,
        params: dict[str, Any],
        builder: Callable[[], Awaitable[T]],
        ttl: int = 3600,
    ) -> T:
        """Build a report once per distinct *params* and serve it from cache after."""
        return await self._facade.get_cached(keys.report_key(report_type, params), builder, ttl)

    async def cache_stats(self) -> dict[str, Any]:
        return {
            "backend": str(await self._facade.active_backend()),
            "health": (await self._facade.probe_health()).to_dict(),
            "stats": await self._facade.cache_stats(),
        }

    async def clear_cache(self) -> CacheClearResult:
        return await self._facade.invalidate_all()
