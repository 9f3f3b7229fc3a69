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
"""Cache key taxonomy.

Keys are plain strings built only here, so no two entity types can collide
and writes know which well-known keys to drop:

- single entity: ``<entity>:<id>`` (``customer:abc123``)
- filtered collection: ``<collection>:<sha1 of canonical filter+options>``
- whole collection: ``<collection>:all``
- report: ``reports:<type>:<base64 of canonical params>``
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

from mvnodesk.cache.codec import json_default
from mvnodesk.domain.models import ENTITY_MODELS
from mvnodesk.query.entity_query import QueryOptions

SYSTEM_STATS_KEY = "system:stats"


def canonical_json(value: Any) -> str:
    """Serialization with sorted keys, so equal filters give equal strings."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=json_default)


def entity_prefix(collection: str) -> str:
    model = ENTITY_MODELS.get(collection)
    return model.cache_prefix if model is not None else collection


def entity_key(collection: str, id: str) -> str:
    return f"{entity_prefix(collection)}:{id}"


def collection_key(
    collection: str,
    filter: dict[str, Any] | None = None,
    options: QueryOptions | None = None,
) -> str:
    payload: dict[str, Any] = {"filter": filter or {}}
    if options is not None and not options.is_default():
        payload["options"] = options.to_dict()
    digest = hashlib.sha1(canonical_json(payload).encode("utf-8")).hexdigest()
    return f"{collection}:{digest}"


def all_key(collection: str) -> str:
    return f"{collection}:all"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def user_permissions_key(user_id: str) -> str:
    return f"user:{user_id}:permissions"


def user_sessions_key(user_id: str) -> str:
    return f"user:{user_id}:sessions"


def customer_key(customer_id: str) -> str:
    return f"customer:{customer_id}"


def sim_key(sim_id: str) -> str:
    return f"sim:{sim_id}"


def sims_by_warehouse_key(warehouse_id: str) -> str:
    return f"sims:warehouse:{warehouse_id}"


def ticket_key(ticket_id: str) -> str:
    return f"ticket:{ticket_id}"


def transactions_key(user_id: str) -> str:
    """Transaction history of one operator or customer."""
    return f"transactions:{user_id}"


def webhook_logs_key(endpoint: str) -> str:
    return f"webhooks:{endpoint}:logs"


def report_key(report_type: str, params: dict[str, Any] | None = None) -> str:
    encoded = base64.b64encode(canonical_json(params or {}).encode("utf-8")).decode("ascii")
    return f"reports:{report_type}:{encoded}"
