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
"""Unified exception hierarchy for mvnodesk.

Every error raised by the data-access layer inherits from MvnoDeskException
so route handlers can translate failures into a single error envelope.

Categories:
- BusinessException: validation errors, missing records, illegal transitions
- InfrastructureException: primary store and cache failures

Store failures always propagate. Cache failures are caught by the data
access facade and turned into misses, so callers never see a
CacheUnavailableException unless they talk to a cache adapter directly.
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class MvnoDeskException(Exception):
    """Base exception for all mvnodesk errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "STORE_UNAVAILABLE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(MvnoDeskException):
    """Domain rule violations and business logic errors."""


class ValidationException(BusinessException):
    """Missing or malformed input fields."""


class ResourceNotFoundException(BusinessException):
    """Requested record does not exist."""


class ConflictException(BusinessException):
    """A unique field (email, ICCID, MSISDN) is already taken."""


class InvalidStateException(BusinessException):
    """Status transition not allowed from the record's current state."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(MvnoDeskException):
    """Failures of the primary store or the cache."""


class StoreUnavailableException(InfrastructureException):
    """The primary store could not serve the operation. Always fatal."""


class CacheUnavailableException(InfrastructureException):
    """The cache could not serve the operation. Never fatal past the facade."""


class CacheSerializationException(InfrastructureException):
    """A cached payload could not be decoded."""


class OperationTimeoutException(InfrastructureException):
    """Operation exceeded its allowed time limit."""


class UnsupportedCacheOperationException(InfrastructureException):
    """The active cache backend cannot perform the requested operation."""
