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
"""Which cache keys a write to a collection can make stale.

Only well-known composite keys are listed. Hashed filter keys
(``<collection>:<sha1>``) are left to expire by TTL, so a filtered list
may lag a write by up to its TTL.
"""

from __future__ import annotations

from typing import Any

from mvnodesk.cache import keys
from mvnodesk.store.collections import Collection


def keys_to_invalidate(
    collection: str,
    id: str | None,
    document: dict[str, Any] | None = None,
) -> list[str]:
    """Keys to drop after a write to ``collection``.

    ``document`` is whatever the caller knows about the written record (the
    inserted document or the patch); it supplies foreign keys such as the
    SIM's warehouse or the transaction's operator.
    """
    doc = document or {}
    result: list[str] = []
    if id:
        result.append(keys.entity_key(collection, id))

    if collection == Collection.USERS and id:
        result += [keys.user_permissions_key(id), keys.transactions_key(id)]
    elif collection == Collection.SIMS:
        result.append(keys.all_key(collection))
        if doc.get("warehouse_id"):
            result.append(keys.sims_by_warehouse_key(doc["warehouse_id"]))
    elif collection == Collection.TRANSACTIONS:
        for owner in ("operator_id", "customer_id"):
            if doc.get(owner):
                result.append(keys.transactions_key(doc[owner]))
    elif collection in (Collection.TICKETS, Collection.PLANS, Collection.WAREHOUSES):
        result.append(keys.all_key(collection))

    result.append(keys.SYSTEM_STATS_KEY)
    return list(dict.fromkeys(result))
