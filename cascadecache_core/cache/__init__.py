"""Cache module - Cache facade, entries and key handling.

This module provides the public cache interface over a cascade of stores.
"""

from cascadecache_core.cache.entry import (
    CacheEntry,
    EntryMetadata,
)
from cascadecache_core.cache.keys import (
    expand_key,
    namespaced_key,
)
from cascadecache_core.cache.cache import CascadeCache
from cascadecache_core.cache.decorator import cached

__all__ = [
    "CacheEntry",
    "EntryMetadata",
    "expand_key",
    "namespaced_key",
    "CascadeCache",
    "cached",
]
