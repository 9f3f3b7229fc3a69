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
"""Composable query predicates producing MongoDB filter documents.

Example::

    active = Specification(lambda: {"status": "active"}, fields={"status"})
    vip = FilterOperator.gte("total_spent", 1000)

    (active & vip).to_filter()   # {"$and": [{"status": "active"}, {"total_spent": {"$gte": 1000}}]}
    (active | vip).to_filter()   # {"$or": [...]}
    (~active).to_filter()        # {"$nor": [{"status": "active"}]}

Each specification remembers which document fields it touches so that
:class:`~mvnodesk.query.entity_query.EntityQuery` can check them against
the entity model before the filter reaches the store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any


class Specification:
    """A filter-document factory that combines with ``&``, ``|`` and ``~``."""

    def __init__(self, predicate: Callable[[], dict[str, Any]], fields: Iterable[str] = ()) -> None:
        self._predicate = predicate
        self._fields = frozenset(fields)

    @property
    def fields(self) -> frozenset[str]:
        return self._fields

    def to_filter(self) -> dict[str, Any]:
        return self._predicate()

    def __and__(self, other: Specification) -> Specification:
        """Both specs must match (``$and``)."""
        left, right = self._predicate, other._predicate

        def and_predicate() -> dict[str, Any]:
            left_doc, right_doc = left(), right()
            if not left_doc:
                return right_doc
            if not right_doc:
                return left_doc
            return {"$and": [left_doc, right_doc]}

        return Specification(and_predicate, self._fields | other._fields)

    def __or__(self, other: Specification) -> Specification:
        """Either spec may match (``$or``)."""
        left, right = self._predicate, other._predicate

        def or_predicate() -> dict[str, Any]:
            left_doc, right_doc = left(), right()
            if not left_doc:
                return right_doc
            if not right_doc:
                return left_doc
            return {"$or": [left_doc, right_doc]}

        return Specification(or_predicate, self._fields | other._fields)

    def __invert__(self) -> Specification:
        """Negated spec (``$nor``). Negating the empty filter stays empty."""
        pred = self._predicate

        def not_predicate() -> dict[str, Any]:
            doc = pred()
            return {"$nor": [doc]} if doc else {}

        return Specification(not_predicate, self._fields)

    @classmethod
    def empty(cls) -> Specification:
        return cls(lambda: {})

    @classmethod
    def all_of(cls, specs: Iterable[Specification]) -> Specification:
        result = cls.empty()
        for spec in specs:
            result = result & spec
        return result
