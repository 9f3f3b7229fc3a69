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
"""Generic entity service over the data access facade."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, Generic, TypeVar, get_args, get_origin

from mvnodesk.access.facade import DataAccessFacade
from mvnodesk.cache import keys
from mvnodesk.domain.models import Entity
from mvnodesk.domain.validation import validate_model
from mvnodesk.kernel.exceptions import ResourceNotFoundException, ValidationException
from mvnodesk.query.entity_query import EntityQuery, QueryOptions

E = TypeVar("E", bound=Entity)


def plain(values: dict[str, Any]) -> dict[str, Any]:
    """Replace enum members by their values before a dict reaches the store."""
    return {k: v.value if isinstance(v, Enum) else v for k, v in values.items()}


class EntityService(Generic[E]):
    """Create/read/update for one entity collection.

    Subclasses declare the model through the generic parameter::

        class PlanService(EntityService[Plan]):
            ttl = 3600

    Reads go through the facade's read-through cache under ``<entity>:<id>``
    for ``ttl`` seconds; writes invalidate that key.
    """

    _entity_type: type[Entity] | None = None
    ttl: int = 3600

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            if get_origin(base) is EntityService:
                args = get_args(base)
                if args and not isinstance(args[0], TypeVar):
                    cls._entity_type = args[0]
                break

    def __init__(self, facade: DataAccessFacade) -> None:
        if self._entity_type is None:
            raise TypeError(f"{type(self).__name__} must be declared as EntityService[Model]")
        self._facade = facade
        self._model: type[E] = self._entity_type  # type: ignore[assignment]

    @property
    def collection(self) -> str:
        return self._model.collection

    def query(self) -> EntityQuery:
        return EntityQuery.for_entity(self._model)

    def _to_model(self, document: dict[str, Any]) -> E:
        return self._model.model_validate(document)

    async def _insert(self, data: dict[str, Any]) -> E:
        entity = validate_model(self._model, data)
        created = await self._facade.create_entity(self.collection, entity.to_document())
        return self._to_model(created)

    async def get(self, id: str, *, fresh: bool = False) -> E | None:
        """The entity, from the cache unless *fresh* asks for the store copy."""
        if fresh:
            document = await self._facade.store.find_by_id(self.collection, id)
        else:
            document = await self._facade.get_entity(self.collection, id, self.ttl)
        return self._to_model(document) if document is not None else None

    async def require(self, id: str, *, fresh: bool = False) -> E:
        entity = await self.get(id, fresh=fresh)
        if entity is None:
            raise ResourceNotFoundException(
                f"{self._model.__name__} '{id}' not found",
                code="NOT_FOUND",
                context={"collection": self.collection, "id": id},
            )
        return entity

    async def find(
        self,
        query: EntityQuery | None = None,
        options: QueryOptions | None = None,
        *,
        use_cache: bool = False,
    ) -> list[E]:
        documents = await self._facade.query_entities(
            self.collection,
            query or self.query(),
            options,
            use_cache=use_cache,
            ttl=self.ttl,
        )
        return [self._to_model(doc) for doc in documents]

    def _check_patch(self, patch: dict[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(patch) - set(self._model.model_fields))
        if unknown:
            raise ValidationException(
                f"Unknown {self._model.__name__} field(s): {', '.join(unknown)}",
                code="UNKNOWN_FIELD",
                context={"fields": unknown},
            )
        return plain({k: v for k, v in patch.items() if k not in ("id", "created_at", "updated_at")})

    async def update(self, id: str, patch: dict[str, Any], *, extra_keys: Iterable[str] = ()) -> E:
        """Apply *patch* and return the stored entity.

        Raises:
            ResourceNotFoundException: No entity has that id.
        """
        changes = self._check_patch(patch)
        if not await self._facade.write_entity(self.collection, id, changes, extra_keys=extra_keys):
            raise ResourceNotFoundException(
                f"{self._model.__name__} '{id}' not found",
                code="NOT_FOUND",
                context={"collection": self.collection, "id": id},
            )
        return await self.require(id)

    async def find_all_cached(self, options: QueryOptions | None = None) -> list[E]:
        """Every entity of the collection, cached as ``<collection>:all``.

        Writes drop that key for collections listed in the invalidation rules.
        """

        async def load() -> list[dict[str, Any]]:
            return await self._facade.query_entities(self.collection, None, options)

        documents = await self._facade.get_cached(keys.all_key(self.collection), load, self.ttl)
        return [self._to_model(doc) for doc in documents]
