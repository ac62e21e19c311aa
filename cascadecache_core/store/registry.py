"""CascadeCache Store Registry - Store Lookup by Name.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import fields
from typing import Any, Callable, Collection, Dict, FrozenSet, List, Mapping, Optional

from cascadecache_core.errors import ConfigurationError
from cascadecache_core.store.backend import StorageBackend, StorageConfig
from cascadecache_core.store.memory import MemoryStore
from cascadecache_core.store.redis import RedisConfig, RedisStore

logger = logging.getLogger(__name__)

StoreFactory = Callable[[Dict[str, Any]], StorageBackend]


def _memory_factory(options: Dict[str, Any]) -> StorageBackend:
    options.setdefault("name", "memory")
    return MemoryStore(StorageConfig(**options))


def _redis_factory(options: Dict[str, Any]) -> StorageBackend:
    client = options.pop("client", None)
    return RedisStore(RedisConfig(**options), client=client)


MEMORY_OPTIONS = frozenset(f.name for f in fields(StorageConfig))
REDIS_OPTIONS = frozenset(f.name for f in fields(RedisConfig)) | {"client"}


class StoreRegistry:
    """Maps store names to factories building backend adapters."""

    def __init__(self):
        self._factories: Dict[str, StoreFactory] = {}
        self._accepts: Dict[str, FrozenSet[str]] = {}
        self._lock = threading.Lock()

    def register(
        self,
        name: str,
        factory: StoreFactory,
        accepts: Optional[Collection[str]] = None,
    ) -> None:
        """Register a store factory.

        Args:
            name: Store name
            factory: Callable receiving the store options dict
            accepts: Option keys the store understands, None if unknown
        """
        with self._lock:
            self._factories[name] = factory
            if accepts is None:
                self._accepts.pop(name, None)
            else:
                self._accepts[name] = frozenset(accepts)

    def names(self) -> List[str]:
        """List registered store names."""
        return sorted(self._factories)

    def lookup(
        self,
        name: str,
        options: Optional[Mapping[str, Any]] = None,
        shared: Collection[str] = (),
    ) -> StorageBackend:
        """Build a store by name.

        Keys listed in ``shared`` were given to every tier of a cascade.
        Those the store does not accept are dropped; any other unknown key
        is an error.

        Args:
            name: Registered store name
            options: Store constructor options
            shared: Option keys shared across tiers

        Returns:
            Backend adapter

        Raises:
            ConfigurationError: Unknown name or invalid options
        """
        factory = self._factories.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown cache store {name!r}; known stores: {', '.join(self.names())}"
            )
        options = dict(options or {})
        accepts = self._accepts.get(name)
        if accepts is not None:
            ignored = [key for key in options if key in shared and key not in accepts]
            for key in ignored:
                del options[key]
            if ignored:
                logger.debug(f"Store {name!r} ignores shared options {ignored}")

        try:
            return factory(options)
        except TypeError as e:
            raise ConfigurationError(f"Invalid options for cache store {name!r}: {e}") from e


_registry = StoreRegistry()
_registry.register("memory", _memory_factory, MEMORY_OPTIONS)
_registry.register("memory_store", _memory_factory, MEMORY_OPTIONS)
_registry.register("redis", _redis_factory, REDIS_OPTIONS)
_registry.register("redis_store", _redis_factory, REDIS_OPTIONS)


def get_registry() -> StoreRegistry:
    """Get the global store registry."""
    return _registry


def register_store(
    name: str,
    factory: StoreFactory,
    accepts: Optional[Collection[str]] = None,
) -> None:
    """Register a store factory in the global registry."""
    _registry.register(name, factory, accepts)


def lookup_store(name: str, options: Optional[Mapping[str, Any]] = None) -> StorageBackend:
    """Build a store from the global registry."""
    return _registry.lookup(name, options)


__all__ = [
    "StoreRegistry",
    "StoreFactory",
    "get_registry",
    "register_store",
    "lookup_store",
]
