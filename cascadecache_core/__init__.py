"""CascadeCache - Multi-Tier Cache Cascade.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A cache facade that spreads every operation over an ordered list of
cache stores, fastest first:
- Reads walk the tiers and backfill the faster tiers that missed
- Batch reads merge tier results and backfill the first tier
- Writes, deletes and counters fan out to every tier
- A failing tier is isolated, logged and counted, never raised
- Optional metrics sink for per-tier hit/miss/error events

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                      CascadeCache System                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │CascadeCache │  │    Keys     │  │   Entry     │   FACADE    │
    │  │ read/write  │  │ canonical/ns│  │  TTL/expiry │   LAYER     │
    │  └──────┬──────┘  └─────────────┘  └─────────────┘             │
    │         │                                                       │
    │  ┌──────┴────────────────────────────────────────┐             │
    │  │               CascadeEngine                    │             │
    │  │   walk + backfill │ fan-out │ batch merge      │   CASCADE   │
    │  └──────┬───────────────────────────┬────────────┘   LAYER     │
    │         │ Tier.invoke (isolated)    │ MetricsSink               │
    │  ┌──────┴────────────────────────┐  │                           │
    │  │        Backend Adapters        │  │                          │
    │  │   ┌────────┐  ┌────────┐      │   STORAGE                    │
    │  │   │ Memory │  │ Redis  │ ...  │   LAYER                      │
    │  │   └────────┘  └────────┘      │                              │
    │  └───────────────────────────────┘                              │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from cascadecache_core import CascadeCache, CascadeConfig, MetricsCollector

    # Process memory in front of Redis
    cache = CascadeCache(
        CascadeConfig.local_redis(
            local={"max_size": 10000, "expires_in": 30},
            redis={"url": "redis://cache:6379/0"},
            expires_in=300,
            fire_custom_metrics=True,
        ),
        metrics=MetricsCollector(),
    )

    cache.write("user:1", {"name": "Ada"})
    user = cache.read("user:1")          # memory hit
    cache.read_many("user:1", "user:2")  # {"user:1": {...}}

    @cache.cached(ttl=60)
    def get_expensive_data(id: str):
        return fetch_from_database(id)
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from cascadecache_core.errors import (
    CascadeError,
    ConfigurationError,
)
from cascadecache_core.cache import (
    CacheEntry,
    EntryMetadata,
    CascadeCache,
    cached,
    expand_key,
)
from cascadecache_core.store import (
    StorageBackend,
    StorageConfig,
    StoreCapabilities,
    MemoryStore,
    RedisStore,
    RedisConfig,
    lookup_store,
    register_store,
)
from cascadecache_core.metrics import (
    MetricsSink,
    NullMetricsSink,
    MetricsCollector,
)
from cascadecache_core.cascade import (
    CascadeConfig,
    CascadeEngine,
    Tier,
    TierFault,
    TierOptions,
    TierOutcome,
    TierSpec,
)

__all__ = [
    # Errors
    "CascadeError",
    "ConfigurationError",
    # Cache
    "CascadeCache",
    "CacheEntry",
    "EntryMetadata",
    "cached",
    "expand_key",
    # Storage
    "StorageBackend",
    "StorageConfig",
    "StoreCapabilities",
    "MemoryStore",
    "RedisStore",
    "RedisConfig",
    "lookup_store",
    "register_store",
    # Metrics
    "MetricsSink",
    "NullMetricsSink",
    "MetricsCollector",
    # Cascade
    "CascadeConfig",
    "CascadeEngine",
    "Tier",
    "TierFault",
    "TierOptions",
    "TierOutcome",
    "TierSpec",
]
