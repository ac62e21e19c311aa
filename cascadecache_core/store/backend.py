"""CascadeCache Storage Backend - Backend Store Adapter Contract.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from cascadecache_core.cache.entry import CacheEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreCapabilities:
    """Optional operations a backend supports.

    Attributes:
        batch_get: Native multi-key read (``get_many``)
        delete_matching: Pattern-based deletion
        counters: ``increment`` / ``decrement``
    """

    batch_get: bool = False
    delete_matching: bool = False
    counters: bool = False

    @classmethod
    def probe(cls, backend: Any) -> "StoreCapabilities":
        """Resolve the capabilities of an adapter.

        Adapters announce their capabilities through a ``capabilities``
        attribute. Adapters without one are inspected for the optional
        methods instead.

        Args:
            backend: Backend store adapter

        Returns:
            StoreCapabilities instance
        """
        declared = getattr(backend, "capabilities", None)
        if isinstance(declared, StoreCapabilities):
            return declared

        def has(name: str) -> bool:
            return callable(getattr(backend, name, None))

        return cls(
            batch_get=has("get_many"),
            delete_matching=has("delete_matching"),
            counters=has("increment") and has("decrement"),
        )


@dataclass
class StorageConfig:
    """Storage backend configuration.

    Attributes:
        name: Backend name
        max_size: Maximum entries
    """

    name: str = "storage"
    max_size: Optional[int] = None


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        evictions: Number of entries evicted for capacity
        entry_count: Current entry count
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    evictions: int = 0
    entry_count: int = 0
    last_write_at: Optional[datetime] = None

    def record_write(self) -> None:
        """Record a write."""
        self.writes += 1
        self.last_write_at = datetime.now()


class StorageBackend(ABC):
    """Abstract backend store adapter used as a cascade tier.

    Implementations:
    - MemoryStore: In-process dictionary
    - RedisStore: Redis backend

    ``get`` returns ``None`` for a missing key and raises only for
    adapter-level faults; the cascade catches those per tier. Optional
    operations are announced through ``capabilities``; the base class
    raises ``NotImplementedError`` for them.
    """

    capabilities: StoreCapabilities = StoreCapabilities()

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize backend.

        Args:
            config: Storage configuration
        """
        self.config = config or StorageConfig()
        self._stats = StorageStats()

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Get entry by key.

        Args:
            key: Cache key

        Returns:
            CacheEntry or None
        """

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> bool:
        """Store entry.

        Args:
            key: Cache key
            entry: Cache entry

        Returns:
            True if stored
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """

    @abstractmethod
    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number cleared
        """

    def get_many(self, keys: Iterable[str]) -> Dict[str, CacheEntry]:
        """Get multiple entries in one round trip."""
        raise NotImplementedError(f"{type(self).__name__} has no batch get")

    def delete_matching(self, pattern: str) -> int:
        """Delete entries whose key matches a glob pattern."""
        raise NotImplementedError(f"{type(self).__name__} has no pattern delete")

    def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a numeric entry, ``None`` if the key is absent."""
        raise NotImplementedError(f"{type(self).__name__} has no counters")

    def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a numeric entry, ``None`` if the key is absent."""
        raise NotImplementedError(f"{type(self).__name__} has no counters")

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def close(self) -> None:
        """Release backend resources."""

    def health_check(self) -> bool:
        """Check storage health.

        Returns:
            True if healthy
        """
        try:
            test_key = "__health_check__"
            self.set(test_key, CacheEntry(key=test_key, value="test"))
            result = self.get(test_key)
            self.delete(test_key)
            return result is not None
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False


__all__ = ["StorageBackend", "StorageConfig", "StorageStats", "StoreCapabilities"]
