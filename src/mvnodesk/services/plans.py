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
"""Plan catalogue."""

from __future__ import annotations

from typing import Any

from mvnodesk.domain.models import Plan, PlanType, RecordStatus
from mvnodesk.domain.validation import require_fields
from mvnodesk.services.base import EntityService


class PlanService(EntityService[Plan]):
    ttl = 3600

    async def create(self, data: dict[str, Any], created_by: str | None = None) -> Plan:
        require_fields(data, "name", "type", "data", "minutes", "sms", "validity")
        payload = {
            **data,
            "status": data.get("status", RecordStatus.ACTIVE),
            "created_by": created_by or data.get("created_by"),
        }
        return await self._insert(payload)

    async def list_plans(
        self,
        type: PlanType | str | None = None,
        status: RecordStatus | str | None = None,
    ) -> list[Plan]:
        """Plans matching the filters. Unfiltered is cached as ``plans:all``."""
        query = self.query().where(type=type, status=status)
        if query.to_filter():
            return await self.find(query)
        return await self.find_all_cached()
