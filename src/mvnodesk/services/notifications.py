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
"""In-app notifications. The store's TTL index drops them after seven days."""

from __future__ import annotations

from typing import Any

from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import Notification
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.services.base import EntityService


class NotificationService(EntityService[Notification]):
    ttl = 300

    async def send(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        return await self._insert({
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": type,
            "read": False,
            "metadata": metadata or {},
        })

    async def for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        """Newest first."""
        return await self.find(self.query().where(user_id=user_id), QueryOptions(sort=(("created_at", -1),), limit=limit))

    async def mark_read(self, id: str) -> bool:
        return await self._facade.write_entity(self.collection, id, {"read": True, "read_at": utcnow()})

    async def unread_count(self, user_id: str) -> int:
        return await self._facade.store.count(self.collection, self.query().where(user_id=user_id, read=False).to_filter())
