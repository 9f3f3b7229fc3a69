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
"""User activity tracking and daily activity counts."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog

from mvnodesk.access.facade import DataAccessFacade
from mvnodesk.core.clock import Clock, utcnow
from mvnodesk.kernel.exceptions import StoreUnavailableException
from mvnodesk.store.collections import Collection

logger = structlog.get_logger(__name__)


class AnalyticsService:
    """Activity events live in the ``analytics`` collection, one per event.

    Each event carries its ``timestamp`` and the UTC ``date`` (``YYYY-MM-DD``)
    it falls on, which the daily counts group by.
    """

    def __init__(self, facade: DataAccessFacade, *, clock: Clock = utcnow) -> None:
        self._store = facade.store
        self._clock = clock

    async def track_activity(self, user_id: str, activity: str, metadata: dict[str, Any] | None = None) -> bool:
        """Record one event. Tracking is best-effort: a store failure is logged, not raised."""
        now = self._clock()
        try:
            await self._store.insert(
                Collection.ANALYTICS,
                {
                    "user_id": user_id,
                    "activity": activity,
                    "metadata": metadata or {},
                    "timestamp": now,
                    "date": now.date().isoformat(),
                },
            )
        except StoreUnavailableException as exc:
            logger.warning("activity_tracking_failed", user_id=user_id, activity=activity, error=str(exc))
            return False
        return True

    async def activity_stats(self, user_id: str, days: int = 7) -> dict[str, dict[str, int]]:
        """``{date: {activity: count}}`` for one user over the last *days* days."""
        since = self._clock() - timedelta(days=days)
        rows = await self._store.aggregate(
            Collection.ANALYTICS,
            [
                {"$match": {"user_id": user_id, "timestamp": {"$gte": since}}},
                {"$group": {"_id": {"date": "$date", "activity": "$activity"}, "count": {"$sum": 1}}},
            ],
        )
        stats: dict[str, dict[str, int]] = {}
        for row in sorted(rows, key=lambda r: r["_id"]["date"]):
            stats.setdefault(row["_id"]["date"], {})[row["_id"]["activity"]] = row["count"]
        return stats

    async def global_metrics(self, activity: str, days: int = 30) -> list[int]:
        """Daily counts of *activity*, oldest first, with zero for quiet days."""
        now = self._clock()
        rows = await self._store.aggregate(
            Collection.ANALYTICS,
            [
                {"$match": {"activity": activity, "timestamp": {"$gte": now - timedelta(days=days)}}},
                {"$group": {"_id": "$date", "count": {"$sum": 1}}},
            ],
        )
        counts = {row["_id"]: row["count"] for row in rows}
        return [counts.get((now - timedelta(days=offset)).date().isoformat(), 0) for offset in range(days - 1, -1, -1)]
