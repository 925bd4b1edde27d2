"""YAML configuration loader for s3sum."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, MutableMapping, cast

import yaml

CONFIG_ENV_VAR = "S3SUM_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/s3sum/config.yaml")
DEFAULT_CONFIG_FILE = Path(__file__).resolve().parent.parent / "config" / "default_config.yaml"


def _load_default_config() -> Dict[str, Any]:
    """Read the packaged default configuration YAML."""

    if DEFAULT_CONFIG_FILE.exists():
        with DEFAULT_CONFIG_FILE.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if isinstance(data, dict):
            return cast(Dict[str, Any], data)
        raise ValueError("Default configuration file must contain a mapping at the top level")

    # Fallback values mirror the documented defaults.
    return {
        "checksum": {
            "encoding": "base64",
            "chunk_size": 1024 * 1024,
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s %(name)s: %(message)s",
        },
    }


DEFAULT_CONFIG: Dict[str, Any] = _load_default_config()


def _deep_merge(
    base: MutableMapping[str, Any], override: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], MutableMapping)
            and isinstance(value, MutableMapping)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Resolve the configuration file path using overrides or defaults."""

    if path is not None:
        text = str(path).strip()
        if text:
            return Path(text).expanduser()

    env_override = os.getenv(CONFIG_ENV_VAR, "").strip()
    if env_override:
        return Path(env_override).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def load_raw_config(path: Path | str | None = None) -> Dict[str, Any]:
    """Load configuration data from YAML without applying defaults."""

    candidate = resolve_config_path(path)
    if candidate.exists():
        with candidate.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    else:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return data


def merge_configs(
    base: MutableMapping[str, Any], override: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Return a deep-merged copy of *base* updated with *override*."""

    merged = deepcopy(base)
    _deep_merge(merged, override)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, Any]:
    """Load configuration from YAML, falling back to defaults when absent."""

    data = load_raw_config(path)
    return cast(Dict[str, Any], merge_configs(DEFAULT_CONFIG, data))


def get_config_value(
    *keys: str, default: Any | None = None, config: Dict[str, Any] | None = None
) -> Any:
    """Retrieve a nested configuration value by walking *keys*."""

    current: Any = config if config is not None else load_config()
    for key in keys:
        if not isinstance(current, MutableMapping) or key not in current:
            return default
        current = current[key]
    return current


__all__ = [
    "load_config",
    "load_raw_config",
    "merge_configs",
    "resolve_config_path",
    "get_config_value",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_CONFIG",
]
