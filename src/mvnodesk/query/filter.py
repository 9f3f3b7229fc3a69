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
"""Field-level filter operators.

Example::

    spec = FilterOperator.eq("status", "active") & FilterOperator.gte("total_spent", 100)
"""

from __future__ import annotations

import re
from typing import Any

from mvnodesk.query.specification import Specification


class FilterOperator:
    """Each static method returns a single-field :class:`Specification`."""

    @staticmethod
    def eq(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: _v}, {field})

    @staticmethod
    def neq(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: {"$ne": _v}}, {field})

    @staticmethod
    def gt(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: {"$gt": _v}}, {field})

    @staticmethod
    def gte(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: {"$gte": _v}}, {field})

    @staticmethod
    def lt(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: {"$lt": _v}}, {field})

    @staticmethod
    def lte(field: str, value: Any) -> Specification:
        return Specification(lambda _f=field, _v=value: {_f: {"$lte": _v}}, {field})

    @staticmethod
    def in_list(field: str, values: list[Any]) -> Specification:
        return Specification(lambda _f=field, _v=list(values): {_f: {"$in": _v}}, {field})

    @staticmethod
    def contains(field: str, value: str) -> Specification:
        """Case-insensitive substring match."""
        escaped = re.escape(value)
        return Specification(lambda _f=field, _v=escaped: {_f: {"$regex": _v, "$options": "i"}}, {field})

    @staticmethod
    def between(field: str, low: Any, high: Any) -> Specification:
        """Inclusive range."""
        return Specification(lambda _f=field, _lo=low, _hi=high: {_f: {"$gte": _lo, "$lte": _hi}}, {field})

    @staticmethod
    def is_null(field: str) -> Specification:
        return Specification(lambda _f=field: {_f: None}, {field})

    @staticmethod
    def by(**kwargs: Any) -> Specification:
        """Equality on every keyword, ANDed. ``None`` values are skipped."""
        return Specification.all_of(
            FilterOperator.eq(field, value) for field, value in kwargs.items() if value is not None
        )
