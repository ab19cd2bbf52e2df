"""Typed accessors for the configuration sections the I/O helpers consume."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from oshelpers.core.exceptions import ConfigError

from .cache import get_config


@dataclass(frozen=True)
class LockFileSettings:
    timeout_seconds: Optional[float]
    initial_delay_seconds: float
    growth_limit: int
    multiplier: float


@dataclass(frozen=True)
class OutputCaptureSettings:
    timeout_seconds: Optional[float]


@dataclass(frozen=True)
class TempSettings:
    directory: Optional[Path]


@dataclass(frozen=True)
class StaleLockSettings:
    max_age_seconds: int


def _section(name: str, config_dir: Optional[Path | str]) -> Dict[str, Any]:
    section = get_config(config_dir).get(name)
    if not isinstance(section, dict):
        raise ConfigError(f"{name} section missing from configuration", context={"section": name})
    return section


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def get_lock_file_settings(config_dir: Optional[Path | str] = None) -> LockFileSettings:
    section = _section("lock_file", config_dir)
    try:
        return LockFileSettings(
            timeout_seconds=_optional_float(section.get("timeout_seconds")),
            initial_delay_seconds=float(section["initial_delay_seconds"]),
            growth_limit=int(section["growth_limit"]),
            multiplier=float(section["multiplier"]),
        )
    except KeyError as exc:
        raise ConfigError(
            f"lock_file.{exc.args[0]} missing from configuration",
            context={"section": "lock_file"},
        ) from exc


def get_output_capture_settings(config_dir: Optional[Path | str] = None) -> OutputCaptureSettings:
    section = _section("output_capture", config_dir)
    return OutputCaptureSettings(timeout_seconds=_optional_float(section.get("timeout_seconds")))


def get_temp_settings(config_dir: Optional[Path | str] = None) -> TempSettings:
    section = get_config(config_dir).get("temp") or {}
    raw = section.get("directory")
    return TempSettings(directory=Path(raw).expanduser() if raw else None)


def get_stale_lock_settings(config_dir: Optional[Path | str] = None) -> StaleLockSettings:
    section = get_config(config_dir).get("stale_locks") or {}
    return StaleLockSettings(max_age_seconds=int(section.get("max_age_seconds", 3600)))


__all__ = [
    "LockFileSettings",
    "OutputCaptureSettings",
    "TempSettings",
    "StaleLockSettings",
    "get_lock_file_settings",
    "get_output_capture_settings",
    "get_temp_settings",
    "get_stale_lock_settings",
]
