"""CascadeCache Redis Store - Redis Storage Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import pickle
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from cascadecache_core.cache.entry import CacheEntry
from cascadecache_core.store.backend import StorageBackend, StorageConfig, StoreCapabilities

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig(StorageConfig):
    """Redis-specific configuration.

    Attributes:
        url: Redis URL, takes precedence over host/port/db
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
    """

    name: str = "redis"
    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = "cache:"


class RedisStore(StorageBackend):
    """Redis storage backend.

    The shared, networked tier. Entries are pickled together with their
    metadata and written with a native Redis expiry matching the entry's
    remaining TTL. Connection and protocol errors propagate to the caller;
    the cascade turns them into tier faults.

    Example:
        store = RedisStore(RedisConfig(host="redis.local", port=6379))
        store.set("key", CacheEntry(key="key", value="data"))
        entry = store.get("key")

        # Tests inject a client
        store = RedisStore(client=fakeredis.FakeRedis())
    """

    capabilities = StoreCapabilities(batch_get=True, delete_matching=True, counters=True)

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[Any] = None):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built Redis client, skips connection setup
        """
        super().__init__(config or RedisConfig())
        self.config: RedisConfig = self.config
        self._client: Optional[Any] = client
        self._pool: Optional[Any] = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        import redis

        if self.config.url:
            self._pool = redis.ConnectionPool.from_url(
                self.config.url,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
            )
        else:
            self._pool = redis.ConnectionPool(
                host=self.config.host,
                port=self.config.port,
                db=self.config.db,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                socket_connect_timeout=self.config.socket_connect_timeout,
                max_connections=self.config.max_connections,
                decode_responses=False,  # entries are pickled
            )

        self._client = redis.Redis(connection_pool=self._pool)
        logger.info(f"Connected to Redis at {self.config.url or f'{self.config.host}:{self.config.port}'}")
        return self._client

    def _make_key(self, key: str) -> str:
        return f"{self.config.prefix}{key}"

    def _serialize(self, entry: CacheEntry) -> bytes:
        return pickle.dumps(entry.to_dict())

    def _deserialize(self, data: bytes) -> CacheEntry:
        return CacheEntry.from_dict(pickle.loads(data))

    def _write(self, client: Any, redis_key: str, entry: CacheEntry) -> bool:
        """Write an entry with a native expiry on a client or pipeline.

        Returns:
            False if the entry had already expired and was not written
        """
        data = self._serialize(entry)
        if entry.ttl_seconds is None:
            client.set(redis_key, data)
            return True

        ttl_ms = int(entry.remaining_ttl * 1000)
        if ttl_ms <= 0:
            return False
        client.psetex(redis_key, ttl_ms, data)
        return True

    def _scan(self, client: Any, match: str) -> List[bytes]:
        keys: List[bytes] = []
        cursor = 0
        while True:
            cursor, batch = client.scan(cursor, match=match, count=100)
            keys.extend(batch)
            if cursor == 0:
                break
        return keys

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get entry by key.

        Args:
            key: Cache key

        Returns:
            CacheEntry or None
        """
        client = self._ensure_connected()
        self._stats.reads += 1
        data = client.get(self._make_key(key))
        if data is None:
            return None
        return self._deserialize(data)

    def get_many(self, keys: Iterable[str]) -> Dict[str, CacheEntry]:
        """Get multiple entries with a single MGET.

        Args:
            keys: Keys to read

        Returns:
            Dict of key -> entry for keys present
        """
        keys = list(keys)
        if not keys:
            return {}

        client = self._ensure_connected()
        self._stats.reads += len(keys)
        values = client.mget([self._make_key(k) for k in keys])

        return {
            key: self._deserialize(data)
            for key, data in zip(keys, values)
            if data is not None
        }

    def set(self, key: str, entry: CacheEntry) -> bool:
        """Store entry.

        Args:
            key: Cache key
            entry: Cache entry

        Returns:
            True if stored
        """
        client = self._ensure_connected()
        stored = self._write(client, self._make_key(key), entry)
        if stored:
            self._stats.record_write()
        return stored

    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Cache key

        Returns:
            True if deleted
        """
        client = self._ensure_connected()
        result = client.delete(self._make_key(key))
        self._stats.deletes += 1
        return result > 0

    def delete_matching(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern.

        Args:
            pattern: Glob pattern, applied after the key prefix

        Returns:
            Number deleted
        """
        client = self._ensure_connected()
        keys = self._scan(client, self._make_key(pattern))
        if not keys:
            return 0
        count = client.delete(*keys)
        self._stats.deletes += count
        return count

    def increment(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a numeric entry atomically.

        The entry is re-written inside a WATCH/MULTI transaction so the
        stored metadata and remaining expiry are kept.

        Args:
            key: Cache key
            amount: Amount to add

        Returns:
            New value, or None if the key is absent
        """
        client = self._ensure_connected()
        redis_key = self._make_key(key)

        def apply(pipe: Any) -> Optional[int]:
            data = pipe.get(redis_key)
            if data is None:
                return None
            entry = self._deserialize(data)
            updated = entry.with_value(int(entry.value) + amount)
            pipe.multi()
            if not self._write(pipe, redis_key, updated):
                return None
            return updated.value

        value = client.transaction(apply, redis_key, value_from_callable=True)
        if value is not None:
            self._stats.record_write()
        return value

    def decrement(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a numeric entry atomically.

        Args:
            key: Cache key
            amount: Amount to subtract

        Returns:
            New value, or None if the key is absent
        """
        return self.increment(key, -amount)

    def clear(self) -> int:
        """Clear all entries under the key prefix.

        Returns:
            Number cleared
        """
        client = self._ensure_connected()
        keys = self._scan(client, f"{self.config.prefix}*")
        if not keys:
            return 0
        return client.delete(*keys)

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig"]
