"""Configuration loading for oshelpers."""
from __future__ import annotations

from .cache import clear_all_caches, get_config
from .manager import CONFIG_DIR_ENV, ENV_PREFIX, ConfigManager
from .sections import (
    LockFileSettings,
    OutputCaptureSettings,
    StaleLockSettings,
    TempSettings,
    get_lock_file_settings,
    get_output_capture_settings,
    get_stale_lock_settings,
    get_temp_settings,
)

__all__ = [
    "ConfigManager",
    "ENV_PREFIX",
    "CONFIG_DIR_ENV",
    "get_config",
    "clear_all_caches",
    "LockFileSettings",
    "OutputCaptureSettings",
    "StaleLockSettings",
    "TempSettings",
    "get_lock_file_settings",
    "get_output_capture_settings",
    "get_stale_lock_settings",
    "get_temp_settings",
]
