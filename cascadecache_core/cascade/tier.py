"""CascadeCache Tier - Tier Handles and Isolated Tier Invocation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Every call the cascade makes into a backend goes through ``Tier.invoke``.
It never raises: the backend's return value, a capability gap or a raised
exception all come back as a ``TierOutcome``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from cascadecache_core.cascade.config import CascadeConfig, TierOptions
from cascadecache_core.store.backend import StoreCapabilities
from cascadecache_core.store.registry import StoreRegistry, get_registry

logger = logging.getLogger(__name__)


class OutcomeStatus(Enum):
    """Result kinds of a single tier call."""

    VALUE = auto()        # Backend returned a value
    ABSENT = auto()       # Backend returned nothing (miss)
    FAULT = auto()        # Backend raised
    UNSUPPORTED = auto()  # Backend lacks the capability


@dataclass(frozen=True)
class TierFault:
    """An isolated failure of one tier.

    Attributes:
        tier: Tier name
        operation: Backend method that failed
        error: Exception raised by the backend
    """

    tier: str
    operation: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.tier}.{self.operation}: {type(self.error).__name__}: {self.error}"


@dataclass(frozen=True)
class TierOutcome:
    """Outcome of applying one operation to one tier."""

    status: OutcomeStatus
    value: Any = None
    fault: Optional[TierFault] = None

    @classmethod
    def of(cls, value: Any) -> "TierOutcome":
        if value is None:
            return cls(OutcomeStatus.ABSENT)
        return cls(OutcomeStatus.VALUE, value=value)

    @classmethod
    def failed(cls, fault: TierFault) -> "TierOutcome":
        return cls(OutcomeStatus.FAULT, fault=fault)

    @classmethod
    def unsupported(cls) -> "TierOutcome":
        return cls(OutcomeStatus.UNSUPPORTED)

    @property
    def has_value(self) -> bool:
        return self.status is OutcomeStatus.VALUE

    @property
    def is_fault(self) -> bool:
        return self.status is OutcomeStatus.FAULT


@dataclass
class TierStats:
    """Counters the cascade keeps per tier.

    Attributes:
        hits: Read hits
        misses: Read misses, including expired entries
        errors: Tier faults
        backfills: Entries backfilled into this tier
        last_fault: Description of the most recent fault
        last_fault_at: When the most recent fault happened
    """

    hits: int = 0
    misses: int = 0
    errors: int = 0
    backfills: int = 0
    last_fault: Optional[str] = None
    last_fault_at: Optional[datetime] = None

    def record_fault(self, fault: TierFault) -> None:
        """Record a fault."""
        self.errors += 1
        self.last_fault = str(fault)
        self.last_fault_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "backfills": self.backfills,
            "last_fault": self.last_fault,
            "last_fault_at": self.last_fault_at.isoformat() if self.last_fault_at else None,
        }


class Tier:
    """One position in the cascade.

    Attributes:
        index: Position, 0 is the fastest tier
        name: Tier name
        backend: Backend store adapter
        options: Effective tier options
        capabilities: Optional operations resolved once at construction
        stats: Per-tier counters
    """

    def __init__(self, index: int, name: str, backend: Any, options: TierOptions):
        self.index = index
        self.name = name
        self.backend = backend
        self.options = options
        self.capabilities = StoreCapabilities.probe(backend)
        self.stats = TierStats()

    @property
    def default_ttl(self) -> Optional[float]:
        """TTL applied to entries written without an explicit TTL."""
        return self.options.default_ttl

    def supports(self, capability: str) -> bool:
        """Check an optional capability by name."""
        return bool(getattr(self.capabilities, capability))

    def invoke(self, operation: str, *args: Any, capability: Optional[str] = None) -> TierOutcome:
        """Call a backend method, isolating any failure.

        Args:
            operation: Backend method name
            *args: Method arguments
            capability: Capability required for the call

        Returns:
            TierOutcome, never raises
        """
        if capability is not None and not self.supports(capability):
            return TierOutcome.unsupported()
        try:
            result = getattr(self.backend, operation)(*args)
        except Exception as e:
            fault = TierFault(tier=self.name, operation=operation, error=e)
            self.stats.record_fault(fault)
            return TierOutcome.failed(fault)
        return TierOutcome.of(result)

    def __repr__(self) -> str:
        return f"Tier(index={self.index}, name={self.name!r}, backend={self.backend!r})"


def _tier_name(spec_name: Optional[str], store: Any, index: int) -> str:
    if spec_name:
        return spec_name
    if isinstance(store, str):
        return store
    config = getattr(store, "config", None)
    return getattr(config, "name", None) or f"tier{index}"


def build_tiers(
    config: CascadeConfig,
    registry: Optional[StoreRegistry] = None,
) -> Tuple[Tier, ...]:
    """Construct the tier list for a cascade.

    Store names are resolved through the registry. Duplicate tier names
    get a numeric suffix, starting at their index, until the name is
    unused so metric names stay distinct.

    Args:
        config: Cascade configuration
        registry: Store registry, defaults to the global one

    Returns:
        Tuple of tiers, fastest first

    Raises:
        ConfigurationError: Unknown store or invalid store options
    """
    registry = registry or get_registry()
    tiers: List[Tier] = []
    used = set()

    for index, spec in enumerate(config.tiers):
        options = config.resolve_options(spec)
        if isinstance(spec.store, str):
            backend = registry.lookup(spec.store, options.store_options, shared=config.store_options)
        else:
            backend = spec.store

        base = name = _tier_name(spec.name, spec.store, index)
        suffix = index
        while name in used:
            name = f"{base}{suffix}"
            suffix += 1
        used.add(name)

        tiers.append(Tier(index, name, backend, options))
        logger.debug(f"Tier {index} {name!r} uses {backend!r}")

    return tuple(tiers)


__all__ = [
    "OutcomeStatus",
    "Tier",
    "TierFault",
    "TierOutcome",
    "TierStats",
    "build_tiers",
]
