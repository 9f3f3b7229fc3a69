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
"""Tests for the cache codec, key taxonomy and invalidation map."""

from __future__ import annotations

import base64
import json
from datetime import datetime

import pytest

from mvnodesk.cache import keys
from mvnodesk.cache.codec import decode, encode
from mvnodesk.cache.invalidation import keys_to_invalidate
from mvnodesk.domain.models import Customer, CustomerStatus
from mvnodesk.kernel.exceptions import CacheSerializationException
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.store.collections import Collection


class TestCodec:
    def test_datetimes_and_enums_become_json(self):
        raw = encode({"at": datetime(2024, 5, 1, 8, 30), "status": CustomerStatus.ACTIVE, "tags": {"b", "a"}})

        assert json.loads(raw) == {"at": "2024-05-01T08:30:00", "status": "active", "tags": ["a", "b"]}

    def test_models_are_dumped(self):
        customer = Customer(id="1", name="Ana", email="ana@x.com", phone="555")

        assert decode(encode(customer))["email"] == "ana@x.com"

    def test_unserializable_value(self):
        with pytest.raises(CacheSerializationException) as exc_info:
            encode({"x": object()})
        assert exc_info.value.code == "CACHE_ENCODE_FAILED"

    def test_corrupt_payload(self):
        with pytest.raises(CacheSerializationException) as exc_info:
            decode(b"{oops", "customer:1")
        assert exc_info.value.code == "CACHE_DECODE_FAILED"
        assert exc_info.value.context == {"key": "customer:1"}


class TestKeys:
    def test_entity_key_uses_singular_prefix(self):
        assert keys.entity_key(Collection.CUSTOMERS, "42") == "customer:42"
        assert keys.entity_key(Collection.SIMS, "7") == "sim:7"

    def test_entity_key_for_unmodelled_collection(self):
        assert keys.entity_key("webhook_logs", "1") == "webhook_logs:1"

    def test_collection_key_is_order_independent(self):
        first = keys.collection_key("customers", {"status": "active", "created_by": "u1"})
        second = keys.collection_key("customers", {"created_by": "u1", "status": "active"})

        assert first == second
        assert first.startswith("customers:")
        assert len(first.split(":", 1)[1]) == 40

    def test_collection_key_includes_non_default_options(self):
        plain = keys.collection_key("customers", {})
        limited = keys.collection_key("customers", {}, QueryOptions(limit=10))

        assert plain == keys.collection_key("customers", None, QueryOptions())
        assert plain != limited

    def test_named_keys(self):
        assert keys.all_key("sims") == "sims:all"
        assert keys.user_permissions_key("u1") == "user:u1:permissions"
        assert keys.user_sessions_key("u1") == "user:u1:sessions"
        assert keys.sims_by_warehouse_key("w1") == "sims:warehouse:w1"
        assert keys.transactions_key("u1") == "transactions:u1"
        assert keys.webhook_logs_key("billing") == "webhooks:billing:logs"

    def test_report_key_encodes_params(self):
        key = keys.report_key("sales", {"month": "2024-05"})
        prefix, report_type, encoded = key.split(":", 2)

        assert (prefix, report_type) == ("reports", "sales")
        assert json.loads(base64.b64decode(encoded)) == {"month": "2024-05"}


class TestInvalidation:
    def test_customer_write(self):
        assert keys_to_invalidate(Collection.CUSTOMERS, "42") == ["customer:42", "system:stats"]

    def test_user_write_drops_permissions_and_history(self):
        assert keys_to_invalidate(Collection.USERS, "u1") == [
            "user:u1",
            "user:u1:permissions",
            "transactions:u1",
            "system:stats",
        ]

    def test_sim_write_drops_warehouse_listing(self):
        result = keys_to_invalidate(Collection.SIMS, "s1", {"warehouse_id": "w1"})

        assert result == ["sim:s1", "sims:all", "sims:warehouse:w1", "system:stats"]

    def test_transaction_write_drops_both_histories(self):
        result = keys_to_invalidate(Collection.TRANSACTIONS, "t1", {"operator_id": "op", "customer_id": "c"})

        assert result == ["transaction:t1", "transactions:op", "transactions:c", "system:stats"]

    def test_listing_collections(self):
        for collection in (Collection.TICKETS, Collection.PLANS, Collection.WAREHOUSES):
            assert keys.all_key(collection) in keys_to_invalidate(collection, "x")

    def test_without_id(self):
        assert keys_to_invalidate(Collection.PLANS, None) == ["plans:all", "system:stats"]

    def test_no_duplicates(self):
        result = keys_to_invalidate(Collection.TRANSACTIONS, "t1", {"operator_id": "same", "customer_id": "same"})

        assert result.count("transactions:same") == 1
