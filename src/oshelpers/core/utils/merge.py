"""Deep merge used to layer configuration files."""
from __future__ import annotations

from typing import Any, Dict


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries without mutating inputs.

    Nested mappings are merged key by key; any other value in ``override``
    (lists included) replaces the one in ``base``.

    Example:
        >>> deep_merge({"lock_file": {"growth_limit": 3}}, {"lock_file": {"multiplier": 3}})
        {'lock_file': {'growth_limit': 3, 'multiplier': 3}}
    """
    result: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


__all__ = ["deep_merge"]
