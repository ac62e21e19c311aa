"""Cascade module - Tier construction and cascade orchestration."""

from cascadecache_core.cascade.config import (
    CascadeConfig,
    TierOptions,
    TierSpec,
)
from cascadecache_core.cascade.tier import (
    OutcomeStatus,
    Tier,
    TierFault,
    TierOutcome,
    TierStats,
)
from cascadecache_core.cascade.engine import CascadeEngine

__all__ = [
    "CascadeConfig",
    "TierOptions",
    "TierSpec",
    "OutcomeStatus",
    "Tier",
    "TierFault",
    "TierOutcome",
    "TierStats",
    "CascadeEngine",
]
