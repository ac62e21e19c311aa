"""CascadeCache Errors - Exception Types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Only configuration problems are raised to callers. Failures inside a single
tier are captured as ``TierFault`` values (see ``cascadecache_core.cascade.tier``)
and never escape the cascade.
"""

from __future__ import annotations


class CascadeError(Exception):
    """Base class for cascade cache errors."""


class ConfigurationError(CascadeError, ValueError):
    """Raised when a cascade is built with an unsupported configuration."""


RACE_CONDITION_TTL_UNSUPPORTED = (
    "race_condition_ttl option is not supported by the cascade cache"
)


__all__ = [
    "CascadeError",
    "ConfigurationError",
    "RACE_CONDITION_TTL_UNSUPPORTED",
]
