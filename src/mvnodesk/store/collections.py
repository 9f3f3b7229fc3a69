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
"""Collection names in the primary store and the indexes each one carries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Collection(StrEnum):
    USERS = "users"
    CUSTOMERS = "customers"
    SIMS = "sims"
    TRANSACTIONS = "transactions"
    TICKETS = "tickets"
    PLANS = "plans"
    WAREHOUSES = "warehouses"
    ANALYTICS = "analytics"
    NOTIFICATIONS = "notifications"
    USER_SESSIONS = "user_sessions"
    CACHE = "cache"
    WEBHOOK_LOGS = "webhook_logs"


@dataclass(frozen=True)
class IndexSpec:
    collection: str
    keys: list[tuple[str, int]]
    options: dict[str, Any] = field(default_factory=dict)


NOTIFICATION_RETENTION_SECONDS = 7 * 24 * 3600

INDEXES: tuple[IndexSpec, ...] = (
    IndexSpec(Collection.USERS, [("email", 1)], {"unique": True}),
    IndexSpec(Collection.USERS, [("role", 1), ("is_active", 1)]),
    IndexSpec(Collection.CUSTOMERS, [("email", 1)]),
    IndexSpec(Collection.CUSTOMERS, [("phone", 1)]),
    IndexSpec(Collection.CUSTOMERS, [("created_by", 1)]),
    IndexSpec(Collection.CUSTOMERS, [("status", 1)]),
    IndexSpec(Collection.SIMS, [("iccid", 1)], {"unique": True}),
    IndexSpec(Collection.SIMS, [("msisdn", 1)], {"unique": True}),
    IndexSpec(Collection.SIMS, [("status", 1)]),
    IndexSpec(Collection.SIMS, [("customer_id", 1)]),
    IndexSpec(Collection.SIMS, [("warehouse_id", 1)]),
    IndexSpec(Collection.TRANSACTIONS, [("customer_id", 1), ("created_at", -1)]),
    IndexSpec(Collection.TRANSACTIONS, [("operator_id", 1), ("created_at", -1)]),
    IndexSpec(Collection.TRANSACTIONS, [("status", 1)]),
    IndexSpec(Collection.TRANSACTIONS, [("type", 1), ("created_at", -1)]),
    IndexSpec(Collection.TICKETS, [("created_by", 1), ("created_at", -1)]),
    IndexSpec(Collection.TICKETS, [("assigned_to", 1), ("status", 1)]),
    IndexSpec(Collection.TICKETS, [("customer_id", 1)]),
    IndexSpec(Collection.TICKETS, [("status", 1), ("priority", 1)]),
    IndexSpec(Collection.PLANS, [("status", 1)]),
    IndexSpec(Collection.PLANS, [("type", 1)]),
    IndexSpec(Collection.WAREHOUSES, [("status", 1)]),
    IndexSpec(Collection.WAREHOUSES, [("manager", 1)]),
    IndexSpec(Collection.ANALYTICS, [("user_id", 1), ("date", 1)]),
    IndexSpec(Collection.ANALYTICS, [("activity", 1), ("date", 1)]),
    IndexSpec(Collection.ANALYTICS, [("timestamp", 1)]),
    IndexSpec(Collection.NOTIFICATIONS, [("user_id", 1), ("created_at", -1)]),
    IndexSpec(Collection.NOTIFICATIONS, [("read", 1)]),
    IndexSpec(
        Collection.NOTIFICATIONS,
        [("created_at", 1)],
        {"expireAfterSeconds": NOTIFICATION_RETENTION_SECONDS},
    ),
    IndexSpec(Collection.USER_SESSIONS, [("user_id", 1)]),
    IndexSpec(Collection.USER_SESSIONS, [("expires_at", 1)], {"expireAfterSeconds": 0}),
    IndexSpec(Collection.CACHE, [("key", 1)], {"unique": True}),
    # Physical cleanup of expired store-backed cache entries.
    IndexSpec(Collection.CACHE, [("expires_at", 1)], {"expireAfterSeconds": 0}),
    IndexSpec(Collection.WEBHOOK_LOGS, [("endpoint", 1), ("created_at", -1)]),
    IndexSpec(Collection.WEBHOOK_LOGS, [("status", 1), ("created_at", -1)]),
    IndexSpec(Collection.WEBHOOK_LOGS, [("event", 1), ("created_at", -1)]),
)
