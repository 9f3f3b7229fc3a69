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
"""JSON codec shared by every cache backend.

Datetimes become ISO-8601 strings and pydantic models become their JSON
dump, so a value read back from either backend is plain JSON data.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from mvnodesk.kernel.exceptions import CacheSerializationException


def json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(value: Any) -> str:
    try:
        return json.dumps(value, default=json_default, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise CacheSerializationException(
            f"Cannot serialize value of type {type(value).__name__}",
            code="CACHE_ENCODE_FAILED",
        ) from exc


def decode(raw: str | bytes, key: str | None = None) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
        raise CacheSerializationException(
            f"Corrupt cache payload for key '{key}'",
            code="CACHE_DECODE_FAILED",
            context={"key": key},
        ) from exc
