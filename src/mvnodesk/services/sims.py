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
"""SIM inventory and status transitions.

Status moves only through :meth:`SimService.activate` (available to active)
and :meth:`SimService.suspend` (active to suspended).
"""

from __future__ import annotations

from typing import Any

import structlog

from mvnodesk.cache import keys
from mvnodesk.core.clock import utcnow
from mvnodesk.domain.models import Sim, SimStatus
from mvnodesk.domain.validation import require_fields
from mvnodesk.kernel.exceptions import InvalidStateException, ValidationException
from mvnodesk.services.base import EntityService

logger = structlog.get_logger(__name__)


class SimService(EntityService[Sim]):
    ttl = 3600

    async def create(self, data: dict[str, Any], created_by: str | None = None) -> Sim:
        require_fields(data, "iccid", "msisdn", "operator")
        payload = {**data, "status": SimStatus.AVAILABLE, "created_by": created_by or data.get("created_by")}
        return await self._insert(payload)

    async def list_sims(
        self,
        status: SimStatus | str | None = None,
        operator: str | None = None,
        customer_id: str | None = None,
    ) -> list[Sim]:
        """SIMs matching the filters. The unfiltered list is cached as ``sims:all``."""
        query = self.query().where(status=status, operator=operator, customer_id=customer_id)
        if query.to_filter():
            return await self.find(query)
        return await self.find_all_cached()

    async def list_by_warehouse(self, warehouse_id: str) -> list[Sim]:
        async def load() -> list[dict[str, Any]]:
            return await self._facade.query_entities(self.collection, self.query().where(warehouse_id=warehouse_id))

        documents = await self._facade.get_cached(keys.sims_by_warehouse_key(warehouse_id), load, self.ttl)
        return [self._to_model(doc) for doc in documents]

    async def update(self, id: str, patch: dict[str, Any]) -> Sim:  # type: ignore[override]
        if "status" in patch:
            raise ValidationException(
                "SIM status changes go through activate or suspend",
                code="STATUS_NOT_PATCHABLE",
                context={"id": id},
            )
        sim = await self.require(id, fresh=True)
        return await super().update(id, patch, extra_keys=self._related_keys(sim))

    @staticmethod
    def _related_keys(sim: Sim) -> list[str]:
        return [keys.sims_by_warehouse_key(sim.warehouse_id)] if sim.warehouse_id else []

    async def _transition(self, sim: Sim, expected: SimStatus, target: SimStatus, changes: dict[str, Any]) -> Sim:
        if sim.status != expected:
            raise InvalidStateException(
                f"SIM '{sim.id}' is {sim.status}, expected {expected} to become {target}",
                code="INVALID_SIM_TRANSITION",
                context={"id": sim.id, "from": str(sim.status), "to": str(target)},
            )
        updated = await super().update(
            sim.id,  # type: ignore[arg-type]
            {**changes, "status": target},
            extra_keys=self._related_keys(sim),
        )
        logger.info("sim_status_changed", id=sim.id, status=str(target))
        return updated

    async def activate(self, id: str, customer_id: str, plan_id: str) -> Sim:
        sim = await self.require(id, fresh=True)
        return await self._transition(
            sim,
            SimStatus.AVAILABLE,
            SimStatus.ACTIVE,
            {"customer_id": customer_id, "plan_id": plan_id, "activation_date": utcnow()},
        )

    async def suspend(self, id: str) -> Sim:
        sim = await self.require(id, fresh=True)
        return await self._transition(sim, SimStatus.ACTIVE, SimStatus.SUSPENDED, {})
