"""Store module - Backend store adapters used as cascade tiers."""

from cascadecache_core.store.backend import (
    StorageBackend,
    StorageConfig,
    StorageStats,
    StoreCapabilities,
)
from cascadecache_core.store.memory import MemoryStore
from cascadecache_core.store.redis import RedisStore, RedisConfig
from cascadecache_core.store.registry import (
    StoreRegistry,
    lookup_store,
    register_store,
)

__all__ = [
    "StorageBackend",
    "StorageConfig",
    "StorageStats",
    "StoreCapabilities",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    "StoreRegistry",
    "lookup_store",
    "register_store",
]
