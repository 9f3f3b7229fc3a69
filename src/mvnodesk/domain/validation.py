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
"""Pydantic validation helpers for service inputs."""

from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from mvnodesk.kernel.exceptions import ValidationException

T = TypeVar("T", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)


def validate_model(model: type[T], data: dict[str, Any]) -> T:
    """Validate data against a Pydantic model.

    Raises:
        ValidationException: If validation fails, with structured error details.
    """
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        detail = "; ".join(
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in errors
        )
        raise ValidationException(
            f"Validation failed for {model.__name__}: {detail}",
            code="VALIDATION_ERROR",
            context={"errors": errors},
        ) from exc


def require_fields(data: dict[str, Any], *fields: str) -> None:
    """Raise ValidationException unless every field is present and truthy."""
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationException(
            f"Missing required fields: {', '.join(missing)}",
            code="MISSING_FIELDS",
            context={"missing": missing},
        )


def coerce_enum(enum_type: type[EnumT], value: Any, field: str) -> EnumT:
    """Convert *value* to a member of *enum_type* or raise ValidationException."""
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ValidationException(
            f"Invalid {field} '{value}'",
            code="INVALID_VALUE",
            context={"field": field, "value": value, "allowed": [m.value for m in enum_type]},
        ) from exc
