"""CascadeCache Decorators - Function Result Caching.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import functools
import hashlib
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from cascadecache_core.cache.keys import expand_key

if TYPE_CHECKING:
    from cascadecache_core.cache.cache import CascadeCache

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

MAX_KEY_LENGTH = 250


def _base_key(func: Callable, key_prefix: Optional[str]) -> str:
    return f"{key_prefix or func.__module__}:{func.__qualname__}"


def _make_key(
    func: Callable,
    args: tuple,
    kwargs: dict,
    key_prefix: Optional[str] = None,
    key_builder: Optional[Callable[..., Any]] = None,
) -> str:
    """Build cache key from function call.

    Args:
        func: Function being cached
        args: Positional arguments
        kwargs: Keyword arguments
        key_prefix: Optional prefix, defaults to the function's module
        key_builder: Custom key builder

    Returns:
        Cache key string
    """
    if key_builder:
        return expand_key(key_builder(*args, **kwargs))

    parts = [_base_key(func, key_prefix)]
    parts.extend(expand_key(arg) for arg in args)
    parts.extend(f"{k}={expand_key(kwargs[k])}" for k in sorted(kwargs))
    key = ":".join(parts)

    if len(key) > MAX_KEY_LENGTH:
        digest = hashlib.sha256(key.encode()).hexdigest()
        key = f"{_base_key(func, key_prefix)}:{digest}"

    return key


def cached(
    cache: "CascadeCache",
    ttl: Optional[float] = None,
    key_prefix: Optional[str] = None,
    key_builder: Optional[Callable[..., Any]] = None,
) -> Callable[[F], F]:
    """Decorator to cache function results in a cascade cache.

    Results go through ``CascadeCache.fetch``, so a cached None is reused
    and every tier is populated on a miss. There is no stampede protection:
    concurrent misses each call the function.

    Args:
        cache: Cache to store results in
        ttl: Cache TTL in seconds
        key_prefix: Key prefix, defaults to the function's module
        key_builder: Custom key builder

    Returns:
        Decorator function

    Example:
        @cached(cache, ttl=300)
        def get_user(user_id: int) -> dict:
            return db.get_user(user_id)

        get_user.cache_clear()
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = _make_key(func, args, kwargs, key_prefix, key_builder)
            return cache.fetch(cache_key, lambda: func(*args, **kwargs), ttl=ttl)

        def cache_key(*args, **kwargs) -> str:
            """Get cache key for arguments."""
            return _make_key(func, args, kwargs, key_prefix, key_builder)

        def cache_clear() -> None:
            """Delete cached results of the function.

            Keys produced by a custom ``key_builder`` are not tracked and
            are left in place.
            """
            base = _base_key(func, key_prefix)
            cache.delete(base)
            cache.delete_matched(f"{base}:*")
            logger.debug(f"Cleared cached results for {base}")

        wrapper.cache_key = cache_key
        wrapper.cache_clear = cache_clear
        wrapper.cache = cache
        return wrapper  # type: ignore

    return decorator


__all__ = ["cached"]
