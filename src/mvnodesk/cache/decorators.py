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
"""Caching decorators for async service methods.

Both decorators go through the data access facade, so they inherit its
backend selection and never raise on a cache failure.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from mvnodesk.access.facade import DataAccessFacade

F = TypeVar("F", bound=Callable[..., Any])


def _resolve_key(func: Callable[..., Any], template: str, args: Any, kwargs: Any) -> str:
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    return template.format(**bound.arguments)


def _facade_for(facade: DataAccessFacade | Callable[[Any], DataAccessFacade], args: tuple[Any, ...]) -> DataAccessFacade:
    # A callable is given the bound instance, for methods of a service holding its own facade.
    if callable(facade):
        return facade(args[0])
    return facade


def cacheable(
    facade: DataAccessFacade | Callable[[Any], DataAccessFacade],
    key: str,
    ttl: int | timedelta | None = None,
) -> Callable[[F], F]:
    """Cache the return value, skip execution on cache hit.

    The `key` parameter supports format-string interpolation with function
    argument names. For example, `key="customer:{customer_id}"` will expand
    `{customer_id}` from the function's arguments.

    Args:
        facade: Data access facade, or a callable taking ``self`` and
            returning one.
        key: Key template with {param} placeholders.
        ttl: Optional time-to-live for cached entries.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            resolved_key = _resolve_key(func, key, args, kwargs)
            return await _facade_for(facade, args).get_cached(
                resolved_key, lambda: func(*args, **kwargs), ttl
            )

        return wrapper  # type: ignore[return-value]

    return decorator


def cache_evict(
    facade: DataAccessFacade | Callable[[Any], DataAccessFacade],
    key: str,
) -> Callable[[F], F]:
    """Evict a cache entry after method execution.

    Args:
        facade: Data access facade, or a callable taking ``self`` and
            returning one.
        key: Key template with {param} placeholders.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)
            await _facade_for(facade, args).invalidate(_resolve_key(func, key, args, kwargs))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
