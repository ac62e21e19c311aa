"""Shared fixtures and stub stores for cascade tests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from collections import defaultdict

import pytest

from cascadecache_core.cache.cache import CascadeCache
from cascadecache_core.cascade.config import CascadeConfig, TierSpec
from cascadecache_core.metrics.sink import MetricsSink
from cascadecache_core.store.backend import StorageBackend, StorageConfig, StoreCapabilities
from cascadecache_core.store.memory import MemoryStore


class CountingStore(MemoryStore):
    """Memory store that counts reads."""

    def __init__(self, name="counting", max_size=None):
        super().__init__(StorageConfig(name=name, max_size=max_size))
        self.calls = defaultdict(int)

    def get(self, key):
        self.calls["get"] += 1
        return super().get(key)

    def get_many(self, keys):
        self.calls["get_many"] += 1
        result = {}
        for key in keys:
            entry = MemoryStore.get(self, key)
            if entry is not None:
                result[key] = entry
        return result


class FailingStore(StorageBackend):
    """Store whose every operation raises."""

    capabilities = StoreCapabilities(batch_get=True, delete_matching=True, counters=True)

    def __init__(self, name="broken"):
        super().__init__(StorageConfig(name=name))
        self.attempts = 0

    def _fail(self, *args):
        self.attempts += 1
        raise ConnectionError("tier unavailable")

    get = set = delete = clear = get_many = delete_matching = increment = decrement = _fail


class PlainStore:
    """Duck-typed adapter with only the mandatory operations."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, entry):
        self.data[key] = entry
        return True

    def delete(self, key):
        return self.data.pop(key, None) is not None

    def clear(self):
        count = len(self.data)
        self.data.clear()
        return count


class BrokenPlainStore(PlainStore):
    """Duck-typed adapter without batch reads whose reads and writes raise."""

    def get(self, key):
        raise ConnectionError("tier unavailable")

    def set(self, key, entry):
        raise ConnectionError("tier unavailable")


class ListSink(MetricsSink):
    """Sink remembering every event."""

    def __init__(self):
        self.events = []

    def record(self, event_name, count=1):
        self.events.append((event_name, count))

    def names(self):
        return [name for name, _ in self.events]


class RaisingSink(MetricsSink):
    """Sink that always raises."""

    def record(self, event_name, count=1):
        raise RuntimeError("metrics backend down")


@pytest.fixture
def l1():
    return CountingStore("l1")


@pytest.fixture
def l2():
    return CountingStore("l2")


@pytest.fixture
def cache(l1, l2):
    """Two memory tiers sharing a 60 second default TTL."""
    return CascadeCache(CascadeConfig(tiers=[TierSpec(l1), TierSpec(l2)], default_ttl=60))
