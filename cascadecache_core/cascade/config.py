"""CascadeCache Config - Cascade and Tier Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from cascadecache_core.errors import RACE_CONDITION_TTL_UNSUPPORTED, ConfigurationError

# Legacy option names accepted by ``from_options``
_TTL_KEYS = ("expires_in", "default_ttl")
_RACE_KEY = "race_condition_ttl"


def _check_ttl(ttl: Optional[float], what: str) -> None:
    if ttl is not None and ttl <= 0:
        raise ConfigurationError(f"{what} must be positive, got {ttl!r}")


def _pop_ttl(options: Dict[str, Any]) -> Optional[float]:
    ttl = None
    for key in _TTL_KEYS:
        if key in options:
            ttl = options.pop(key)
    return ttl


@dataclass(frozen=True)
class TierOptions:
    """Options applied to a single tier.

    Attributes:
        default_ttl: TTL for entries written to the tier without an explicit TTL
        race_condition_ttl: Unsupported, must stay None
        store_options: Options passed to the store constructor
    """

    default_ttl: Optional[float] = None
    race_condition_ttl: Optional[float] = None
    store_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.race_condition_ttl is not None:
            raise ConfigurationError(RACE_CONDITION_TTL_UNSUPPORTED)
        _check_ttl(self.default_ttl, "default_ttl")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "TierOptions":
        """Build tier options from a legacy option mapping.

        ``expires_in``/``default_ttl`` become the tier TTL; everything else
        is handed to the store constructor.

        Args:
            options: Option mapping

        Returns:
            TierOptions instance
        """
        options = dict(options)
        if _RACE_KEY in options:
            raise ConfigurationError(RACE_CONDITION_TTL_UNSUPPORTED)
        ttl = _pop_ttl(options)
        return cls(default_ttl=ttl, store_options=options)

    def layered_over(self, shared: "TierOptions") -> "TierOptions":
        """Merge these options on top of shared ones."""
        store_options = dict(shared.store_options)
        store_options.update(self.store_options)
        return TierOptions(
            default_ttl=self.default_ttl if self.default_ttl is not None else shared.default_ttl,
            store_options=store_options,
        )


@dataclass(frozen=True)
class TierSpec:
    """Describes one tier of the cascade.

    Attributes:
        store: Registered store name (``"memory"``, ``"redis"``) or an adapter
        options: Tier-specific options, None to use the shared defaults
        name: Tier name used in logs and metrics
    """

    store: Any
    options: Optional[TierOptions] = None
    name: Optional[str] = None


TierSpecLike = Union[TierSpec, str, Tuple[str, Mapping[str, Any]], Any]


def _coerce_spec(spec: TierSpecLike) -> TierSpec:
    if isinstance(spec, TierSpec):
        return spec
    if isinstance(spec, str):
        return TierSpec(store=spec)
    if isinstance(spec, (tuple, list)):
        if len(spec) != 2 or not isinstance(spec[0], str):
            raise ConfigurationError(f"Tier spec must be (store_name, options), got {spec!r}")
        store, options = spec
        return TierSpec(store=store, options=TierOptions.from_mapping(options or {}))
    # A constructed adapter
    return TierSpec(store=spec)


@dataclass(frozen=True)
class CascadeConfig:
    """Immutable cascade configuration.

    Built directly, a config emits metrics whenever a sink is supplied
    (``enable_metrics=True``). Built with ``from_options`` it follows the
    ``fire_custom_metrics`` flag, which is off unless set, so a sink passed
    alongside a flat option mapping stays silent by default.

    Attributes:
        tiers: Tier specs, fastest first
        default_ttl: Shared default TTL in seconds
        store_options: Shared store constructor options
        enable_metrics: Emit tier hit/miss/error events to the metrics sink
        namespace: Key namespace applied by the cache facade
        parallel_fanout: Run fan-out operations on a thread pool
        max_workers: Thread pool size, defaults to the tier count
        race_condition_ttl: Unsupported, must stay None
    """

    tiers: Sequence[TierSpecLike] = ()
    default_ttl: Optional[float] = None
    store_options: Mapping[str, Any] = field(default_factory=dict)
    enable_metrics: bool = True
    namespace: Optional[str] = None
    parallel_fanout: bool = False
    max_workers: Optional[int] = None
    race_condition_ttl: Optional[float] = None

    def __post_init__(self):
        if self.race_condition_ttl is not None:
            raise ConfigurationError(RACE_CONDITION_TTL_UNSUPPORTED)
        _check_ttl(self.default_ttl, "default_ttl")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers!r}")
        object.__setattr__(self, "tiers", tuple(_coerce_spec(s) for s in self.tiers))

    @property
    def shared_options(self) -> TierOptions:
        """Options used by tiers that do not override them."""
        return TierOptions(default_ttl=self.default_ttl, store_options=dict(self.store_options))

    def resolve_options(self, spec: TierSpec) -> TierOptions:
        """Get the effective options for a tier.

        Args:
            spec: Tier spec

        Returns:
            The tier's own options, or the shared ones
        """
        return spec.options if spec.options is not None else self.shared_options

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "CascadeConfig":
        """Build a config from a flat option mapping.

        Recognised keys: ``stores``, ``expires_in``/``default_ttl``,
        ``namespace``, ``fire_custom_metrics``, ``parallel_fanout``,
        ``max_workers`` and ``race_condition_ttl`` (always rejected). Any
        other key is a shared store option, given to every tier built from
        a store name; stores ignore shared keys they do not declare.
        ``fire_custom_metrics`` defaults to False here, unlike
        ``enable_metrics`` on the class.

        Example:
            CascadeConfig.from_options({
                "expires_in": 60,
                "stores": ["memory", ("redis", {"expires_in": 300})],
            })

        Args:
            options: Option mapping

        Returns:
            CascadeConfig instance

        Raises:
            ConfigurationError: Unsupported or invalid options
        """
        options = dict(options or {})
        if _RACE_KEY in options:
            raise ConfigurationError(RACE_CONDITION_TTL_UNSUPPORTED)

        stores = options.pop("stores", None) or []
        ttl = _pop_ttl(options)
        return cls(
            tiers=[_coerce_spec(s) for s in stores],
            default_ttl=ttl,
            namespace=options.pop("namespace", None),
            enable_metrics=bool(options.pop("fire_custom_metrics", False)),
            parallel_fanout=bool(options.pop("parallel_fanout", False)),
            max_workers=options.pop("max_workers", None),
            store_options=options,
        )

    @classmethod
    def local_redis(
        cls,
        local: Optional[Mapping[str, Any]] = None,
        redis: Optional[Mapping[str, Any]] = None,
        **shared: Any,
    ) -> "CascadeConfig":
        """Two-tier preset: process memory in front of Redis.

        Each tier's options are layered over the shared ones.

        Example:
            CascadeConfig.local_redis(
                local={"max_size": 1000, "expires_in": 30},
                redis={"url": "redis://cache:6379/0"},
                expires_in=300,
            )

        Args:
            local: Memory tier options
            redis: Redis tier options
            **shared: Options shared by both tiers and the cascade

        Returns:
            CascadeConfig instance
        """
        base = cls.from_options(shared)
        shared_options = base.shared_options
        tiers = (
            TierSpec(
                store="memory",
                options=TierOptions.from_mapping(local or {}).layered_over(shared_options),
                name="local",
            ),
            TierSpec(
                store="redis",
                options=TierOptions.from_mapping(redis or {}).layered_over(shared_options),
                name="redis",
            ),
        )
        return cls(
            tiers=tiers,
            default_ttl=base.default_ttl,
            store_options=base.store_options,
            enable_metrics=base.enable_metrics,
            namespace=base.namespace,
            parallel_fanout=base.parallel_fanout,
            max_workers=base.max_workers,
        )


__all__ = ["CascadeConfig", "TierOptions", "TierSpec"]
