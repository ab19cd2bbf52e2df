"""Centralized configuration caching.

Provides a single process-wide copy of the merged configuration. The cache
key fingerprints ``OSHELPERS_*`` environment variables and the user config
files so long-running processes (and tests) never observe stale settings.
"""
from __future__ import annotations

import copy
import hashlib
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .manager import ENV_PREFIX, ConfigManager

_config_cache: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


def _cache_key(config_dir: Optional[Path | str]) -> str:
    mgr_dir = ConfigManager._resolve_user_config_dir(config_dir)

    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    files: list[tuple[str, int, int]] = []
    if mgr_dir is not None and mgr_dir.is_dir():
        for p in sorted(mgr_dir.iterdir()):
            if p.suffix not in {".yaml", ".yml"}:
                continue
            try:
                st = p.stat()
                files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
            except OSError:
                files.append((p.name, 0, 0))

    raw = repr((str(mgr_dir), env_items, files))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


def get_config(config_dir: Optional[Path | str] = None, *, validate: bool = True) -> Dict[str, Any]:
    """Return the cached merged configuration (a deep copy callers may mutate)."""
    key = _cache_key(config_dir)
    with _cache_lock:
        cached = _config_cache.get(key)
        if cached is None:
            cached = ConfigManager(config_dir).load_config(validate=validate)
            _config_cache[key] = cached
        return copy.deepcopy(cached)


def clear_all_caches() -> None:
    """Drop every cached configuration."""
    with _cache_lock:
        _config_cache.clear()


__all__ = ["get_config", "clear_all_caches"]
