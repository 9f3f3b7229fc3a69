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
"""MongoDB primary store adapter built on Motor."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, TypeVar

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from mvnodesk.config.properties import StoreProperties
from mvnodesk.core.clock import Clock, utcnow
from mvnodesk.kernel.exceptions import (
    ConflictException,
    OperationTimeoutException,
    StoreUnavailableException,
)
from mvnodesk.query.entity_query import QueryOptions
from mvnodesk.resilience.time_limiter import run_with_timeout
from mvnodesk.store.collections import INDEXES

T = TypeVar("T")

logger = structlog.get_logger(__name__)

_LOGICAL_OPERATORS = ("$and", "$or", "$nor")


def connect_store(properties: StoreProperties) -> MongoStoreAdapter:
    """Create the process-wide Motor client and wrap it in a store adapter.

    Motor connects lazily, so this never blocks; the first command (or the
    availability probe) is what reaches the server.
    """
    client: AsyncIOMotorClient = AsyncIOMotorClient(  # type: ignore[type-arg]
        properties.uri,
        maxPoolSize=properties.max_pool_size,
        serverSelectionTimeoutMS=properties.server_selection_timeout_ms,
        socketTimeoutMS=properties.socket_timeout_ms,
    )
    return MongoStoreAdapter(
        client,
        client[properties.database],
        command_timeout=properties.command_timeout_seconds,
    )


class MongoStoreAdapter:
    """Durable entity storage. The single source of truth for every collection.

    Identifiers are generated as ``str(ObjectId())`` and stored in ``_id``;
    documents handed back to callers carry them as ``id``. Inserts stamp
    ``created_at``/``updated_at`` and every update restamps ``updated_at``.

    All driver failures and timeouts surface as
    :class:`StoreUnavailableException`, duplicate unique keys as
    :class:`ConflictException`.
    """

    def __init__(
        self,
        client: Any,
        database: AsyncIOMotorDatabase,  # type: ignore[type-arg]
        *,
        command_timeout: float | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._client = client
        self._database = database
        self._timeout = command_timeout
        self._clock = clock

    @property
    def database_name(self) -> str:
        return str(self._database.name)

    async def _call(self, operation: str, collection: str, awaitable: Awaitable[T]) -> T:
        try:
            return await run_with_timeout(awaitable, self._timeout, f"store.{operation}")
        except DuplicateKeyError as exc:
            raise ConflictException(
                f"Duplicate key in '{collection}'",
                code="DUPLICATE_KEY",
                context={"collection": collection, "details": getattr(exc, "details", None)},
            ) from exc
        except (OperationTimeoutException, PyMongoError) as exc:
            logger.error("store_operation_failed", operation=operation, collection=collection, error=str(exc))
            raise StoreUnavailableException(
                f"Store {operation} on '{collection}' failed: {exc}",
                code="STORE_UNAVAILABLE",
                context={"operation": operation, "collection": collection},
            ) from exc

    @staticmethod
    def _from_mongo(raw: dict[str, Any] | None) -> dict[str, Any] | None:
        if raw is None:
            return None
        doc = dict(raw)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        return doc

    @classmethod
    def _translate_filter(cls, filter: dict[str, Any] | None) -> dict[str, Any]:
        """Rename ``id`` to ``_id`` at every level a field name can appear."""
        if not filter:
            return {}
        translated: dict[str, Any] = {}
        for key, value in filter.items():
            if key in _LOGICAL_OPERATORS:
                translated[key] = [cls._translate_filter(part) for part in value]
            elif key == "id":
                translated["_id"] = value
            else:
                translated[key] = value
        return translated

    @staticmethod
    def _clean_patch(patch: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in patch.items() if k not in ("id", "_id", "created_at")}

    async def ping(self) -> None:
        await self._call("ping", "admin", self._client.admin.command("ping"))

    async def insert(self, collection: str, document: dict[str, Any]) -> dict[str, Any]:
        now = self._clock()
        doc = dict(document)
        doc["_id"] = str(doc.pop("id", None) or ObjectId())
        doc["created_at"] = now
        doc["updated_at"] = now
        await self._call("insert", collection, self._database[collection].insert_one(doc))
        logger.debug("store_inserted", collection=collection, id=doc["_id"])
        return self._from_mongo(doc)  # type: ignore[return-value]

    async def find_by_id(self, collection: str, id: str) -> dict[str, Any] | None:
        raw = await self._call("find_by_id", collection, self._database[collection].find_one({"_id": id}))
        return self._from_mongo(raw)

    async def find_one(self, collection: str, filter: dict[str, Any]) -> dict[str, Any] | None:
        raw = await self._call(
            "find_one", collection, self._database[collection].find_one(self._translate_filter(filter))
        )
        return self._from_mongo(raw)

    async def find(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        options: QueryOptions | None = None,
    ) -> list[dict[str, Any]]:
        cursor = self._database[collection].find(self._translate_filter(filter))
        if options is not None:
            if options.sort:
                cursor = cursor.sort(list(options.sort))
            if options.skip:
                cursor = cursor.skip(options.skip)
            if options.limit:
                cursor = cursor.limit(options.limit)
        raws = await self._call("find", collection, cursor.to_list(length=None))
        return [self._from_mongo(raw) for raw in raws]  # type: ignore[misc]

    async def count(self, collection: str, filter: dict[str, Any] | None = None) -> int:
        return await self._call(
            "count", collection, self._database[collection].count_documents(self._translate_filter(filter))
        )

    async def update_by_id(self, collection: str, id: str, patch: dict[str, Any]) -> bool:
        return await self.update_one(collection, {"_id": id}, patch)

    async def update_one(self, collection: str, filter: dict[str, Any], patch: dict[str, Any]) -> bool:
        update = {"$set": {**self._clean_patch(patch), "updated_at": self._clock()}}
        result = await self._call(
            "update", collection, self._database[collection].update_one(self._translate_filter(filter), update)
        )
        return result.matched_count > 0

    async def increment(self, collection: str, id: str, field: str, amount: float) -> bool:
        update = {"$inc": {field: amount}, "$set": {"updated_at": self._clock()}}
        result = await self._call("increment", collection, self._database[collection].update_one({"_id": id}, update))
        return result.matched_count > 0

    async def push(self, collection: str, id: str, field: str, item: Any) -> bool:
        update = {"$push": {field: item}, "$set": {"updated_at": self._clock()}}
        result = await self._call("push", collection, self._database[collection].update_one({"_id": id}, update))
        return result.matched_count > 0

    async def upsert(self, collection: str, filter: dict[str, Any], values: dict[str, Any]) -> None:
        await self._call(
            "upsert",
            collection,
            self._database[collection].update_one(self._translate_filter(filter), {"$set": values}, upsert=True),
        )

    async def delete_by_id(self, collection: str, id: str) -> bool:
        return await self.delete_one(collection, {"_id": id})

    async def delete_one(self, collection: str, filter: dict[str, Any]) -> bool:
        result = await self._call(
            "delete", collection, self._database[collection].delete_one(self._translate_filter(filter))
        )
        return result.deleted_count > 0

    async def delete_many(self, collection: str, filter: dict[str, Any]) -> int:
        result = await self._call(
            "delete_many", collection, self._database[collection].delete_many(self._translate_filter(filter))
        )
        return int(result.deleted_count)

    async def aggregate(self, collection: str, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        cursor = self._database[collection].aggregate(pipeline)
        return await self._call("aggregate", collection, cursor.to_list(length=None))

    async def ensure_indexes(self) -> None:
        for spec in INDEXES:
            await self._call(
                "create_index", spec.collection, self._database[spec.collection].create_index(spec.keys, **spec.options)
            )
        logger.info("store_indexes_ensured", database=self.database_name, count=len(INDEXES))

    async def close(self) -> None:
        self._client.close()
