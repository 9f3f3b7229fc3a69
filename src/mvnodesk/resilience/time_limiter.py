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
"""Time limits for outbound store and cache calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from mvnodesk.kernel.exceptions import OperationTimeoutException

T = TypeVar("T")


async def run_with_timeout(awaitable: Awaitable[T], timeout: float | None, operation: str) -> T:
    """Await *awaitable*, raising OperationTimeoutException after *timeout* seconds.

    A ``None`` or non-positive timeout awaits without a limit.
    """
    if timeout is None or timeout <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except TimeoutError as exc:
        raise OperationTimeoutException(
            f"{operation} exceeded timeout of {timeout}s",
            code="TIMEOUT",
            context={"operation": operation, "timeout": timeout},
        ) from exc
