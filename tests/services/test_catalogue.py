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
"""Tests for PlanService and WarehouseService."""

from __future__ import annotations

import pytest

from mvnodesk.domain.models import PlanType, RecordStatus
from mvnodesk.kernel.exceptions import ValidationException
from mvnodesk.services.plans import PlanService
from mvnodesk.services.warehouses import WarehouseService


def _plan(name: str, type: str = "principal", **extra):
    return {
        "name": name,
        "type": type,
        "data": "5GB",
        "minutes": "unlimited",
        "sms": "unlimited",
        "validity": "30 days",
        "base_cost": 80.0,
        "retail_price": 120.0,
        **extra,
    }


class TestPlans:
    @pytest.mark.asyncio
    async def test_create_and_list(self, facade):
        plans = PlanService(facade)
        basic = await plans.create(_plan("Basic"), created_by="admin1")
        await plans.create(_plan("Extra data", type="complementary", status="inactive"))

        assert basic.status == RecordStatus.ACTIVE
        assert basic.created_by == "admin1"
        assert [p.name for p in await plans.list_plans(type=PlanType.COMPLEMENTARY)] == ["Extra data"]
        assert [p.name for p in await plans.list_plans(status="active")] == ["Basic"]

    @pytest.mark.asyncio
    async def test_catalogue_listing_is_invalidated(self, facade):
        plans = PlanService(facade)
        basic = await plans.create(_plan("Basic"))
        assert len(await plans.list_plans()) == 1

        await plans.update(basic.id, {"retail_price": 99.0})
        await plans.create(_plan("Plus"))

        listed = {p.name: p for p in await plans.list_plans()}
        assert set(listed) == {"Basic", "Plus"}
        assert listed["Basic"].retail_price == 99.0

    @pytest.mark.asyncio
    async def test_required_fields(self, facade):
        with pytest.raises(ValidationException):
            await PlanService(facade).create({"name": "Broken", "type": "principal"})


class TestWarehouses:
    @pytest.mark.asyncio
    async def test_new_warehouse_is_empty_and_active(self, facade):
        warehouses = WarehouseService(facade)

        warehouse = await warehouses.create({"name": "North", "location": "MTY", "manager": "u1", "total_sims": 500})

        assert warehouse.total_sims == 0
        assert warehouse.available_sims == 0
        assert warehouse.status == RecordStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_listing_is_invalidated(self, facade):
        warehouses = WarehouseService(facade)
        await warehouses.create({"name": "North", "location": "MTY", "manager": "u1"})
        assert len(await warehouses.list_warehouses()) == 1

        await warehouses.create({"name": "South", "location": "MID", "manager": "u2"})

        assert len(await warehouses.list_warehouses()) == 2
