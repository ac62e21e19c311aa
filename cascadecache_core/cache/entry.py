"""CascadeCache Entry - Cache Entry with TTL.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional


@dataclass
class EntryMetadata:
    """Metadata for a cache entry.

    Attributes:
        created_at: When entry was created (epoch seconds)
        size_bytes: Approximate size of value in bytes
        source: Name of the tier that produced the entry
    """

    created_at: float = field(default_factory=time.time)
    size_bytes: int = 0
    source: Optional[str] = None


@dataclass
class CacheEntry:
    """A cached value with an optional time to live.

    ``None`` and ``False`` are valid cached values; absence of an entry is
    what signals a miss.

    Attributes:
        key: Cache key
        value: Cached value
        ttl_seconds: Time to live in seconds, ``None`` for no expiry
        metadata: Entry metadata
    """

    key: str
    value: Any
    ttl_seconds: Optional[float] = None
    metadata: EntryMetadata = field(default_factory=EntryMetadata)

    def __post_init__(self):
        if self.metadata.size_bytes == 0:
            self.metadata.size_bytes = sys.getsizeof(self.value)

    @property
    def expires_at(self) -> Optional[float]:
        """Get expiration timestamp."""
        if self.ttl_seconds is None:
            return None
        return self.metadata.created_at + self.ttl_seconds

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check whether the entry has expired.

        Args:
            now: Reference time, defaults to the current time

        Returns:
            True if expired
        """
        expires_at = self.expires_at
        if expires_at is None:
            return False
        return (now if now is not None else time.time()) >= expires_at

    @property
    def remaining_ttl(self) -> Optional[float]:
        """Get remaining TTL in seconds."""
        expires_at = self.expires_at
        if expires_at is None:
            return None
        return max(0.0, expires_at - time.time())

    def fresh_copy(self, ttl: Optional[float], source: Optional[str] = None) -> "CacheEntry":
        """Create a new entry for the same value starting a new TTL now.

        Args:
            ttl: TTL of the new entry
            source: Tier the value came from

        Returns:
            New CacheEntry
        """
        return CacheEntry(
            key=self.key,
            value=self.value,
            ttl_seconds=ttl,
            metadata=EntryMetadata(source=source or self.metadata.source),
        )

    def with_value(self, value: Any) -> "CacheEntry":
        """Copy the entry with a new value, keeping its expiry.

        Args:
            value: New value

        Returns:
            New CacheEntry
        """
        metadata = replace(self.metadata, size_bytes=sys.getsizeof(value))
        return CacheEntry(
            key=self.key,
            value=value,
            ttl_seconds=self.ttl_seconds,
            metadata=metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "key": self.key,
            "value": self.value,
            "ttl_seconds": self.ttl_seconds,
            "metadata": {
                "created_at": self.metadata.created_at,
                "size_bytes": self.metadata.size_bytes,
                "source": self.metadata.source,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Create from dictionary.

        Args:
            data: Dictionary data

        Returns:
            CacheEntry instance
        """
        meta = data.get("metadata", {})
        metadata = EntryMetadata(
            created_at=meta.get("created_at", time.time()),
            size_bytes=meta.get("size_bytes", 0),
            source=meta.get("source"),
        )
        return cls(
            key=data["key"],
            value=data["value"],
            ttl_seconds=data.get("ttl_seconds"),
            metadata=metadata,
        )

    def __repr__(self) -> str:
        if self.ttl_seconds is None:
            return f"CacheEntry(key={self.key!r})"
        return f"CacheEntry(key={self.key!r}, ttl={self.remaining_ttl:.1f}s)"


__all__ = ["CacheEntry", "EntryMetadata"]
