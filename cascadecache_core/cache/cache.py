"""CascadeCache Cache - Public Cache Facade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from cascadecache_core.cache.entry import CacheEntry
from cascadecache_core.cache.keys import expand_key, namespaced_key, strip_namespace
from cascadecache_core.cascade.config import CascadeConfig
from cascadecache_core.cascade.engine import CascadeEngine
from cascadecache_core.cascade.tier import Tier
from cascadecache_core.errors import RACE_CONDITION_TTL_UNSUPPORTED, ConfigurationError
from cascadecache_core.metrics.sink import MetricsSink
from cascadecache_core.store.registry import StoreRegistry

logger = logging.getLogger(__name__)


class CascadeCache:
    """Cache facade over a cascade of stores.

    Keys may be strings, lists/tuples, dicts or objects with a
    ``cache_key``; they are canonicalized and namespaced before reaching
    the cascade.

    Features:
    - Read-through with backfill of faster tiers
    - Write/delete through every tier
    - Batch reads merged across tiers
    - Counters
    - fetch (get-or-compute) and a ``cached`` decorator

    A miss and a read against a cascade whose tiers all failed look the
    same to callers.

    Example:
        cache = CascadeCache(CascadeConfig(
            tiers=["memory", ("redis", {"url": "redis://cache:6379/0"})],
            default_ttl=300,
        ))

        cache.write("user:1", {"name": "Ada"})
        user = cache.read("user:1")

        total = cache.fetch(["report", 2024], lambda: build_report(2024))

        # Legacy option mapping
        cache = CascadeCache(expires_in=60, stores=["memory", "memory"])
    """

    def __init__(
        self,
        config: Optional[CascadeConfig] = None,
        metrics: Optional[MetricsSink] = None,
        registry: Optional[StoreRegistry] = None,
        **options: Any,
    ):
        """Initialize cache.

        Args:
            config: Cascade configuration
            metrics: Metrics sink
            registry: Store registry for named tiers
            **options: Legacy options, used when no config is given

        Raises:
            ConfigurationError: Invalid or unsupported configuration
        """
        if config is None:
            config = CascadeConfig.from_options(options)
        elif options:
            raise ConfigurationError(
                f"Pass either a CascadeConfig or options, not both: {sorted(options)}"
            )

        self.config = config
        self._engine = CascadeEngine(config, metrics=metrics, registry=registry)

    @property
    def engine(self) -> CascadeEngine:
        return self._engine

    @property
    def tiers(self) -> List[Tier]:
        return list(self._engine.tiers)

    @property
    def stores(self) -> List[Any]:
        """Backend adapters in tier order."""
        return [tier.backend for tier in self._engine.tiers]

    def _key(self, name: Any) -> str:
        return namespaced_key(expand_key(name), self.config.namespace)

    def read_entry(self, name: Any) -> Optional[CacheEntry]:
        """Read the full cache entry.

        Args:
            name: Key name

        Returns:
            CacheEntry or None
        """
        return self._engine.read_entry(self._key(name))

    def read(self, name: Any, default: Any = None) -> Any:
        """Read a value.

        Args:
            name: Key name
            default: Returned on a miss

        Returns:
            Cached value (possibly None) or default
        """
        entry = self.read_entry(name)
        return entry.value if entry is not None else default

    def read_many(self, *names: Any) -> Dict[str, Any]:
        """Read several values.

        Args:
            *names: Key names

        Returns:
            Dict keyed by canonical key, absent keys omitted
        """
        keys = [self._key(name) for name in names]
        found = self._engine.read_many(keys)
        return {strip_namespace(key, self.config.namespace): value for key, value in found.items()}

    def write(self, name: Any, value: Any, ttl: Optional[float] = None) -> bool:
        """Write a value to every tier.

        Args:
            name: Key name
            value: Value to cache
            ttl: TTL in seconds, defaults to each tier's TTL

        Returns:
            True
        """
        return self._engine.write(self._key(name), value, ttl=ttl)

    def write_many(self, items: Mapping[Any, Any], ttl: Optional[float] = None) -> bool:
        """Write several values.

        Args:
            items: Mapping of key name -> value
            ttl: TTL for all items

        Returns:
            True
        """
        for name, value in items.items():
            self._engine.write(self._key(name), value, ttl=ttl)
        return True

    def delete(self, name: Any) -> bool:
        """Delete a key from every tier.

        Returns:
            True
        """
        return self._engine.delete(self._key(name))

    def exist(self, name: Any) -> bool:
        """Check whether a key is cached (a cached None counts).

        Args:
            name: Key name

        Returns:
            True if cached in any tier
        """
        return self.read_entry(name) is not None

    def fetch(
        self,
        name: Any,
        factory: Optional[Callable[[], Any]] = None,
        ttl: Optional[float] = None,
        force: bool = False,
        race_condition_ttl: Optional[float] = None,
    ) -> Any:
        """Read a value, computing and caching it on a miss.

        A cached None is returned without calling the factory.

        Args:
            name: Key name
            factory: Computes the value on a miss
            ttl: TTL for a computed value
            force: Skip the read and recompute
            race_condition_ttl: Unsupported

        Returns:
            Cached or computed value

        Raises:
            ConfigurationError: race_condition_ttl was given
        """
        if race_condition_ttl is not None:
            raise ConfigurationError(RACE_CONDITION_TTL_UNSUPPORTED)

        key = self._key(name)
        if not force:
            entry = self._engine.read_entry(key)
            if entry is not None or factory is None:
                return entry.value if entry is not None else None
        elif factory is None:
            return None

        logger.debug(f"Computing {key!r} (force={force})")
        value = factory()
        self._engine.write(key, value, ttl=ttl)
        return value

    def increment(self, name: Any, amount: int = 1) -> Optional[int]:
        """Increment a counter.

        Tiers are incremented independently; the first tier holding the
        key provides the result.

        Args:
            name: Key name
            amount: Amount to add

        Returns:
            New value or None when no tier has the key
        """
        return self._engine.increment(self._key(name), amount)

    def decrement(self, name: Any, amount: int = 1) -> Optional[int]:
        """Decrement a counter.

        Args:
            name: Key name
            amount: Amount to subtract

        Returns:
            New value or None when no tier has the key
        """
        return self._engine.decrement(self._key(name), amount)

    def delete_matched(self, pattern: str) -> None:
        """Delete every key matching a glob pattern.

        Args:
            pattern: Glob pattern, relative to the namespace
        """
        self._engine.delete_matching(namespaced_key(pattern, self.config.namespace))

    def clear(self) -> int:
        """Clear every tier.

        Returns:
            Total entries cleared
        """
        return self._engine.clear()

    def cached(
        self,
        ttl: Optional[float] = None,
        key_prefix: Optional[str] = None,
        key_builder: Optional[Callable[..., Any]] = None,
    ):
        """Decorator caching function results in this cache.

        See ``cascadecache_core.cache.decorator.cached``.
        """
        from cascadecache_core.cache.decorator import cached

        return cached(self, ttl=ttl, key_prefix=key_prefix, key_builder=key_builder)

    def tier_stats(self) -> List[Dict[str, Any]]:
        """Get stats for each tier."""
        return self._engine.tier_stats()

    def close(self) -> None:
        """Release engine and backend resources."""
        self._engine.close()

    def __contains__(self, name: Any) -> bool:
        return self.exist(name)

    def __getitem__(self, name: Any) -> Any:
        entry = self.read_entry(name)
        if entry is None:
            raise KeyError(name)
        return entry.value

    def __setitem__(self, name: Any, value: Any) -> None:
        self.write(name, value)

    def __delitem__(self, name: Any) -> None:
        self.delete(name)

    def __enter__(self) -> "CascadeCache":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"CascadeCache(tiers={[t.name for t in self._engine.tiers]}, namespace={self.config.namespace!r})"


__all__ = ["CascadeCache"]
