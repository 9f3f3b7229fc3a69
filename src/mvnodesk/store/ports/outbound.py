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
"""Primary store port.

Documents cross this port as plain dicts carrying their identifier under
``id``. Every method raises
:class:`~mvnodesk.kernel.exceptions.StoreUnavailableException` when the
store cannot answer; a missing document is a ``None``/``False`` result,
never an exception.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from mvnodesk.query.entity_query import QueryOptions


@runtime_checkable
class StorePort(Protocol):
    async def ping(self) -> None: ...

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]: ...

    async def find_by_id(self, collection: str, id: str) -> dict[str, Any] | None: ...

    async def find_one(self, collection: str, filter: dict[str, Any]) -> dict[str, Any] | None: ...

    async def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
    ) -> list[dict[str, Any]]: ...

    async def count(self, collection: str, filter: dict[str, Any] | None = None) -> int: ...

    async def update_by_id(self, collection: str, id: str, patch: dict[str, Any]) -> bool: ...

    async def update_one(self, collection: str, filter: dict[str, Any], patch: dict[str, Any]) -> bool: ...

    async def increment(self, collection: str, id: str, field: str, amount: float) -> bool: ...

    async def push(self, collection: str, id: str, field: str, item: Any) -> bool: ...

    async def upsert(self, collection: str, filter: dict[str, Any], values: dict[str, Any]) -> None: ...

    async def delete_by_id(self, collection: str, id: str) -> bool: ...

    async def delete_one(self, collection: str, filter: dict[str, Any]) -> bool: ...

    async def delete_many(self, collection: str, filter: dict[str, Any]) -> int: ...

    async def aggregate(self, collection: str, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]: ...

    async def ensure_indexes(self) -> None: ...

    async def close(self) -> None: ...
