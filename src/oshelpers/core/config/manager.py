"""
oshelpers configuration management (YAML layers + environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import jsonschema
import yaml

from oshelpers.core.exceptions import ConfigError
from oshelpers.core.utils.merge import deep_merge as _deep_merge
from oshelpers.data import get_data_path, read_yaml as read_bundled_yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "OSHELPERS_"
CONFIG_DIR_ENV = "OSHELPERS_CONFIG_DIR"


class ConfigManager:
    """Load, merge, and validate oshelpers configuration.

    Configuration sources (highest to lowest priority):
    1. Environment variables: OSHELPERS_<section>__<key>
    2. User config: <config_dir>/*.yaml (alphabetical order), where config_dir
       is the constructor argument or $OSHELPERS_CONFIG_DIR
    3. Bundled defaults: oshelpers.data/config/*.yaml (alphabetical order)
    """

    def __init__(self, config_dir: Optional[Path | str] = None) -> None:
        self.core_config_dir = get_data_path("config")
        self.user_config_dir = self._resolve_user_config_dir(config_dir)

    @staticmethod
    def _resolve_user_config_dir(config_dir: Optional[Path | str]) -> Optional[Path]:
        if config_dir is not None:
            return Path(config_dir).expanduser()
        raw = os.environ.get(CONFIG_DIR_ENV, "").strip()
        return Path(raw).expanduser() if raw else None

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    def load_yaml(self, path: Path) -> Dict[str, Any]:
        # Fail closed: configuration must never silently ignore invalid YAML.
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}", context={"path": str(path)}) from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Top-level YAML in {path} must be a mapping", context={"path": str(path)}
            )
        return data

    def iter_config_files(self, directory: Optional[Path]) -> List[Path]:
        if directory is None or not directory.is_dir():
            return []
        files = [p for p in directory.iterdir() if p.is_file() and p.suffix in {".yaml", ".yml"}]
        return sorted(files, key=lambda p: p.name)

    # ---------- Environment overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        if value.strip().lower() in {"null", "none", "~"}:
            return None
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str, *, strict: bool) -> List[str]:
        if not raw:
            return []
        segs = raw.split("__")
        if any(seg == "" for seg in segs):
            if strict:
                raise ConfigError(
                    f"Malformed {ENV_PREFIX}* key: empty segment in '{raw}'.",
                    context={"key": raw},
                )
            return []
        return [seg.lower() for seg in segs]

    def _iter_env_overrides(self, *, strict: bool) -> Iterator[Tuple[List[str], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key == CONFIG_DIR_ENV:
                continue
            raw = key[len(ENV_PREFIX):]
            path = self._parse_env_key(raw, strict=strict)
            # Single-segment keys are not settings (sections are mappings).
            if len(path) < 2:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[str], value: Any) -> None:
        cur: Union[Dict[str, Any], Any] = root
        for part in path[:-1]:
            if not isinstance(cur, dict):
                raise ConfigError(
                    f"Environment override traverses a non-mapping at '{part}'",
                    context={"path": ".".join(path)},
                )
            lower_map = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            use_key = lower_map.get(part, part)
            if use_key not in cur or cur[use_key] is None:
                cur[use_key] = {}
            cur = cur[use_key]
        if not isinstance(cur, dict):
            raise ConfigError(
                "Environment override targets a non-mapping section",
                context={"path": ".".join(path)},
            )
        leaf = path[-1]
        lower_map = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
        cur[lower_map.get(leaf, leaf)] = value

    def apply_env_overrides(self, cfg: Dict[str, Any], *, strict: bool = False) -> None:
        for path, typed_value in self._iter_env_overrides(strict=strict):
            logger.debug("Applying environment override %s", ".".join(path))
            self._set_nested(cfg, path, typed_value)

    # ---------- Loading ----------

    def validate_schema(self, cfg: Dict[str, Any]) -> None:
        schema = read_bundled_yaml("schemas", "config.yaml")
        validator = jsonschema.Draft202012Validator(schema)
        errors = sorted(validator.iter_errors(cfg), key=lambda e: [str(p) for p in e.path])
        if errors:
            first = errors[0]
            location = ".".join(str(p) for p in first.path) or "<root>"
            raise ConfigError(
                f"Configuration invalid at {location}: {first.message}",
                context={"path": location, "errors": len(errors)},
            )

    def load_config(self, *, validate: bool = True, strict_env: bool = False) -> Dict[str, Any]:
        """Return the merged configuration dictionary.

        Args:
            validate: Validate the merged result against the bundled schema.
            strict_env: Raise on malformed ``OSHELPERS_*`` keys instead of skipping them.
        """
        cfg: Dict[str, Any] = {}
        for path in self.iter_config_files(self.core_config_dir):
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        for path in self.iter_config_files(self.user_config_dir):
            logger.debug("Loading user config %s", path)
            cfg = self.deep_merge(cfg, self.load_yaml(path))
        self.apply_env_overrides(cfg, strict=strict_env)
        if validate:
            self.validate_schema(cfg)
        return cfg


__all__ = ["ConfigManager", "ENV_PREFIX", "CONFIG_DIR_ENV"]
