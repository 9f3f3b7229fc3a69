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
"""Customer records."""

from __future__ import annotations

from typing import Any

import structlog

from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import Customer, CustomerStatus
from mvnodesk.domain.validation import require_fields
from mvnodesk.kernel.exceptions import ResourceNotFoundException
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.query.filter import FilterOperator
from mvnodesk.services.base import EntityService

logger = structlog.get_logger(__name__)


class CustomerService(EntityService[Customer]):
    ttl = 1800

    async def create(self, data: dict[str, Any], created_by: str | None = None) -> Customer:
        require_fields(data, "name", "email", "phone")
        payload = {
            **data,
            "status": CustomerStatus.ACTIVE,
            "total_spent": 0.0,
            "created_by": created_by or data.get("created_by"),
        }
        return await self._insert(payload)

    async def list_customers(
        self,
        status: CustomerStatus | str | None = None,
        created_by: str | None = None,
        search: str | None = None,
        options: QueryOptions | None = None,
    ) -> list[Customer]:
        """Customers matching the filters, cached per filter combination."""
        query = self.query().where(status=status, created_by=created_by)
        if search:
            query = query.matching(FilterOperator.contains("name", search) | FilterOperator.contains("email", search))
        return await self.find(query, options or QueryOptions(sort=(("created_at", -1),)), use_cache=True)

    async def adjust_total_spent(self, id: str, amount: float) -> None:
        """Add *amount* to the customer's running total and touch last activity."""
        if not await self._facade.increment_field(self.collection, id, "total_spent", amount):
            raise ResourceNotFoundException(
                f"Customer '{id}' not found",
                code="NOT_FOUND",
                context={"collection": self.collection, "id": id},
            )
        await self.touch(id)

    async def touch(self, id: str) -> bool:
        return await self._facade.write_entity(self.collection, id, {"last_activity": utcnow()})
