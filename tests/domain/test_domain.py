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
"""Tests for the domain models, permission table and validation helpers."""

from __future__ import annotations

import pytest

from mvnodesk.domain.models import ENTITY_MODELS, Customer, Ticket, TicketStatus, UserRole
from mvnodesk.domain.permissions import DEFAULT_PERMISSIONS, can_manage, default_permissions, has_permission
from mvnodesk.domain.validation import coerce_enum, require_fields, validate_model
from mvnodesk.kernel.exceptions import BusinessException, ValidationException


class TestModels:
    def test_every_collection_has_a_distinct_prefix(self):
        prefixes = [model.cache_prefix for model in ENTITY_MODELS.values()]

        assert len(prefixes) == len(set(prefixes))
        assert ENTITY_MODELS["customers"] is Customer

    def test_to_document_drops_store_fields(self):
        customer = Customer(id="1", name="Ana", email="ana@x.com", phone="555")

        document = customer.to_document()

        assert "id" not in document
        assert "created_at" not in document
        assert document["status"] == "active"

    def test_enum_values_are_stored(self):
        ticket = Ticket(title="t", description="d", category="billing", priority="low", created_by="u1")

        assert ticket.status == TicketStatus.OPEN
        assert ticket.to_document()["status"] == "open"

    def test_queryable_fields_include_base(self):
        assert {"id", "created_at", "email"} <= Customer.queryable_fields()


class TestPermissions:
    def test_every_role_has_defaults(self):
        assert set(DEFAULT_PERMISSIONS) == set(UserRole)

    def test_default_permissions_are_a_fresh_list(self):
        perms = default_permissions("vendor")
        perms.append("users.delete")

        assert "users.delete" not in default_permissions(UserRole.VENDOR)

    def test_superadmin_passes_everything(self):
        assert has_permission("superadmin", [], "anything")
        assert not has_permission("admin", [], "users.read")

    @pytest.mark.parametrize(
        ("actor", "target", "expected"),
        [("superadmin", "admin", True), ("gerente", "operator", True), ("vendor", "operator", False)],
    )
    def test_can_manage(self, actor, target, expected):
        assert can_manage(actor, target) is expected


class TestValidation:
    def test_validate_model(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_model(Customer, {"name": "Ana"})

        assert exc_info.value.code == "VALIDATION_ERROR"
        assert isinstance(exc_info.value, BusinessException)

    def test_require_fields_rejects_blank(self):
        with pytest.raises(ValidationException) as exc_info:
            require_fields({"name": "", "email": "x"}, "name", "email", "phone")

        assert exc_info.value.context == {"missing": ["name", "phone"]}

    def test_coerce_enum(self):
        assert coerce_enum(UserRole, "admin", "role") is UserRole.ADMIN

        with pytest.raises(ValidationException) as exc_info:
            coerce_enum(UserRole, "pilot", "role")
        assert "admin" in exc_info.value.context["allowed"]
