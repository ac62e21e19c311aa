"""CascadeCache Keys - Key Canonicalization and Namespacing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, Optional

KEY_SEPARATOR = "/"
NAMESPACE_SEPARATOR = ":"


def expand_key(name: Any) -> str:
    """Turn a cache key name into its canonical string form.

    Rules:
    - strings are used as-is (keys are case-sensitive)
    - objects exposing ``cache_key`` (attribute or method) use it
    - lists and tuples join their expanded elements with ``/``
    - dicts become sorted ``key=value`` pairs joined with ``/``
    - anything else falls back to ``str()``

    Example:
        expand_key(["fu", "foo"])         # "fu/foo"
        expand_key({"fu": 2, "foo": 1})   # "foo=1/fu=2"

    Args:
        name: Key name

    Returns:
        Canonical key string
    """
    if isinstance(name, str):
        return name

    cache_key = getattr(name, "cache_key", None)
    if cache_key is not None:
        return str(cache_key() if callable(cache_key) else cache_key)

    if isinstance(name, (list, tuple)):
        return KEY_SEPARATOR.join(expand_key(part) for part in name)

    if isinstance(name, dict):
        pairs = sorted((expand_key(k), expand_key(v)) for k, v in name.items())
        return KEY_SEPARATOR.join(f"{k}={v}" for k, v in pairs)

    return str(name)


def namespaced_key(key: str, namespace: Optional[str] = None) -> str:
    """Prefix a canonical key with its namespace.

    Args:
        key: Canonical key
        namespace: Optional namespace

    Returns:
        Namespaced key
    """
    if not namespace:
        return key
    return f"{namespace}{NAMESPACE_SEPARATOR}{key}"


def strip_namespace(key: str, namespace: Optional[str] = None) -> str:
    """Remove the namespace prefix added by ``namespaced_key``."""
    if not namespace:
        return key
    prefix = f"{namespace}{NAMESPACE_SEPARATOR}"
    return key[len(prefix):] if key.startswith(prefix) else key


__all__ = ["expand_key", "namespaced_key", "strip_namespace"]
