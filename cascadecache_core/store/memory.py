"""CascadeCache Memory Store - In-Process Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
from collections import OrderedDict
from typing import Dict, Iterable, Optional

from cascadecache_core.cache.entry import CacheEntry
from cascadecache_core.store.backend import StorageBackend, StorageConfig, StoreCapabilities

logger = logging.getLogger(__name__)


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    The fastest tier, keeping entries in a process-local dictionary.
    When ``max_size`` is set the least recently used entry is evicted to
    make room for a new key.

    Features:
    - O(1) get/set/delete operations
    - Thread-safe with RLock
    - LRU eviction
    - Glob pattern deletion
    - Counters

    Example:
        store = MemoryStore(StorageConfig(max_size=10000))
        store.set("key", CacheEntry(key="key", value="data"))
        entry = store.get("key")
    """

    capabilities = StoreCapabilities(batch_get=True, delete_matching=True, counters=True)

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize memory store.

        Args:
            config: Storage configuration
        """
        super().__init__(config or StorageConfig(name="memory"))
        self._data: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get entry by key.

        Expired entries are returned as-is; callers decide what to do with
        them.

        Args:
            key: Cache key

        Returns:
            CacheEntry or None
        """
        with self._lock:
            self._stats.reads += 1
            entry = self._data.get(key)
            if entry is not None:
                self._data.move_to_end(key)
            return entry

    def get_many(self, keys: Iterable[str]) -> Dict[str, CacheEntry]:
        """Get multiple entries.

        Args:
            keys: Keys to read

        Returns:
            Dict of key -> entry for keys present
        """
        with self._lock:
            result = {}
            for key in keys:
                entry = self.get(key)
                if entry is not None:
                    result[key] = entry
            return result

    def set(self, key: str, entry: CacheEntry) -> bool:
        """Store entry, evicting the LRU entry when full.

        Args:
            key: Cache key
            entry: Cache entry

        Returns:
            True if stored
        """
        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
            elif self.config.max_size and len(self._data) >= self.config.max_size:
                evicted, _ = self._data.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Evicted {evicted!r} from {self.config.name}")

            self._data[key] = entry
            self._stats.record_write()
            self._stats.entry_count = len(self._data)
            return True

    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._stats.deletes += 1
                self._stats.entry_count = len(self._data)
                return True
            return False

    def delete_matching(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern.

        Args:
            pattern: Glob pattern

        Returns:
            Number deleted
        """
        with self._lock:
            matched = [k for k in self._data if fnmatch.fnmatchcase(k, pattern)]
            for key in matched:
                self.delete(key)
            return len(matched)

    def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a numeric entry in place of its value.

        Args:
            key: Cache key
            amount: Amount to add

        Returns:
            New value, or None if the key is absent or expired
        """
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                self.delete(key)
                return None

            updated = entry.with_value(int(entry.value) + amount)
            self._data[key] = updated
            self._stats.record_write()
            return updated.value

    def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a numeric entry.

        Args:
            key: Cache key
            amount: Amount to subtract

        Returns:
            New value, or None if the key is absent or expired
        """
        return self.increment(key, -amount)

    def clear(self) -> int:
        """Clear all entries.

        Returns:
            Number cleared
        """
        with self._lock:
            count = len(self._data)
            self._data.clear()
            self._stats.entry_count = 0
            return count

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MemoryStore(name={self.config.name!r}, entries={len(self._data)})"


__all__ = ["MemoryStore"]
