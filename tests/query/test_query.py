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
"""Tests for Specification, FilterOperator and EntityQuery."""

from __future__ import annotations

import pytest

from mvnodesk.domain.models import Customer, Sim
from mvnodesk.kernel.exceptions import ValidationException
from mvnodesk.query.entity_query import EntityQuery, QueryOptions
from mvnodesk.query.filter import FilterOperator
from mvnodesk.query.specification import Specification


class TestSpecification:
    def test_and_combines_with_dollar_and(self):
        spec = FilterOperator.eq("status", "active") & FilterOperator.gte("total_spent", 100)

        assert spec.to_filter() == {"$and": [{"status": "active"}, {"total_spent": {"$gte": 100}}]}

    def test_or_combines_with_dollar_or(self):
        spec = FilterOperator.eq("status", "active") | FilterOperator.eq("status", "suspended")

        assert spec.to_filter() == {"$or": [{"status": "active"}, {"status": "suspended"}]}

    def test_invert_uses_nor(self):
        assert (~FilterOperator.eq("status", "active")).to_filter() == {"$nor": [{"status": "active"}]}

    def test_empty_is_neutral(self):
        spec = Specification.empty() & FilterOperator.eq("a", 1)

        assert spec.to_filter() == {"a": 1}
        assert (~Specification.empty()).to_filter() == {}

    def test_fields_are_collected(self):
        spec = FilterOperator.eq("a", 1) & (FilterOperator.eq("b", 2) | ~FilterOperator.is_null("c"))

        assert spec.fields == frozenset({"a", "b", "c"})


class TestFilterOperator:
    def test_contains_escapes_regex(self):
        assert FilterOperator.contains("name", "a.b").to_filter() == {"name": {"$regex": r"a\.b", "$options": "i"}}

    def test_between_is_inclusive(self):
        assert FilterOperator.between("amount", 1, 5).to_filter() == {"amount": {"$gte": 1, "$lte": 5}}

    def test_in_list_copies_values(self):
        values = ["a"]
        spec = FilterOperator.in_list("status", values)
        values.append("b")

        assert spec.to_filter() == {"status": {"$in": ["a"]}}

    def test_by_skips_none(self):
        assert FilterOperator.by(status="active", created_by=None).to_filter() == {"status": "active"}
        assert FilterOperator.by().to_filter() == {}


class TestEntityQuery:
    def test_collection_comes_from_model(self):
        assert EntityQuery.for_entity(Customer).collection == "customers"

    def test_where_and_matching(self):
        query = EntityQuery.for_entity(Customer).where(status="active").matching(FilterOperator.gte("total_spent", 10))

        assert query.to_filter() == {"$and": [{"status": "active"}, {"total_spent": {"$gte": 10}}]}

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            EntityQuery.for_entity(Sim).where(colour="red")

        assert exc_info.value.code == "UNKNOWN_QUERY_FIELD"
        assert exc_info.value.context["fields"] == ["colour"]

    def test_dotted_field_checks_its_root(self):
        EntityQuery.for_entity(Customer).matching(FilterOperator.eq("notes.text", "x"))

        with pytest.raises(ValidationException):
            EntityQuery.for_entity(Customer).matching(FilterOperator.eq("nothing.text", "x"))

    def test_queries_are_immutable(self):
        base = EntityQuery.for_entity(Customer)
        base.where(status="active")

        assert base.to_filter() == {}


class TestQueryOptions:
    def test_default(self):
        assert QueryOptions().is_default()
        assert not QueryOptions(limit=5).is_default()

    def test_to_dict(self):
        options = QueryOptions(sort=(("created_at", -1),), skip=10, limit=5)

        assert options.to_dict() == {"sort": [["created_at", -1]], "skip": 10, "limit": 5}
