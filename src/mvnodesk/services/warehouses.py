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
"""Warehouses holding SIM stock."""

from __future__ import annotations

from typing import Any

from mvnodesk.domain.models import RecordStatus, Warehouse
from mvnodesk.domain.validation import require_fields
from mvnodesk.services.base import EntityService


class WarehouseService(EntityService[Warehouse]):
    ttl = 3600

    async def create(self, data: dict[str, Any]) -> Warehouse:
        """New warehouses start empty and active."""
        require_fields(data, "name", "location", "manager")
        payload = {
            **data,
            "total_sims": 0,
            "available_sims": 0,
            "assigned_sims": 0,
            "reserved_sims": 0,
            "status": RecordStatus.ACTIVE,
        }
        return await self._insert(payload)

    async def list_warehouses(self) -> list[Warehouse]:
        return await self.find_all_cached()
