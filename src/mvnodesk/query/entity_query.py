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
"""Typed per-entity queries.

An :class:`EntityQuery` binds a filter to one entity model and refuses
fields the model does not declare::

    query = EntityQuery.for_entity(Customer).where(status="active")
    query = query.matching(FilterOperator.gte("total_spent", 100))
    customers = await facade.query_entities(query.collection, query)

    EntityQuery.for_entity(Customer).where(colour="red")  # ValidationException
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mvnodesk.domain.models import Entity
from mvnodesk.kernel.exceptions import ValidationException
from mvnodesk.query.filter import FilterOperator
from mvnodesk.query.specification import Specification


@dataclass(frozen=True)
class QueryOptions:
    """Sort, skip and limit for a collection query. ``limit=0`` means no limit."""

    sort: tuple[tuple[str, int], ...] = ()
    skip: int = 0
    limit: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"sort": [list(s) for s in self.sort], "skip": self.skip, "limit": self.limit}

    def is_default(self) -> bool:
        return not self.sort and not self.skip and not self.limit


class EntityQuery:
    """A filter over a single entity collection with checked field names."""

    def __init__(self, model: type[Entity], spec: Specification | None = None) -> None:
        self._model = model
        self._spec = spec or Specification.empty()
        self._check_fields(self._spec.fields)

    @classmethod
    def for_entity(cls, model: type[Entity]) -> EntityQuery:
        return cls(model)

    @property
    def model(self) -> type[Entity]:
        return self._model

    @property
    def collection(self) -> str:
        return self._model.collection

    def where(self, **equals: Any) -> EntityQuery:
        return EntityQuery(self._model, self._spec & FilterOperator.by(**equals))

    def matching(self, spec: Specification) -> EntityQuery:
        return EntityQuery(self._model, self._spec & spec)

    def to_filter(self) -> dict[str, Any]:
        return self._spec.to_filter()

    def _check_fields(self, fields: frozenset[str]) -> None:
        allowed = self._model.queryable_fields()
        unknown = sorted(f for f in fields if f.split(".", 1)[0] not in allowed)
        if unknown:
            raise ValidationException(
                f"Unknown {self._model.__name__} field(s) in query: {', '.join(unknown)}",
                code="UNKNOWN_QUERY_FIELD",
                context={"entity": self._model.__name__, "fields": unknown},
            )

    def __repr__(self) -> str:
        return f"EntityQuery({self._model.__name__}, {self.to_filter()!r})"

