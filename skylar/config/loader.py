"""YAML config loader with environment overrides and runtime get/set."""

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from skylar.config.schema import SkylarConfig

logger = logging.getLogger(__name__)

ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SKYLAR_OPENWEATHER_API_KEY": ("weather", "api_key"),
    "SKYLAR_GEMINI_API_KEY": ("ai", "api_key"),
    "SKYLAR_DB_PATH": ("storage", "db_path"),
}


def load_config(path: str | Path | None = None, apply_env: bool = True) -> SkylarConfig:
    """Load and validate config from a YAML file.

    A missing path gives defaults. Secrets set in the environment win over
    the file so keys never need to be committed.
    """
    raw: dict[str, Any] = {}
    if path is not None and Path(path).exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    elif path is not None:
        logger.warning("Config file %s not found, using defaults", path)

    if apply_env:
        _apply_env_overrides(raw)

    return SkylarConfig(**raw)


def _apply_env_overrides(raw: dict[str, Any]) -> None:
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            raw.setdefault(section, {})[key] = value


def config_hash(config: SkylarConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def redacted(config: SkylarConfig) -> dict[str, Any]:
    """Config as a dict with API keys masked, for display."""
    data = json.loads(config.model_dump_json())
    for section, key in ENV_OVERRIDES.values():
        if key == "api_key" and data[section][key]:
            value = data[section][key]
            data[section][key] = value[:4] + "..." if len(value) > 4 else "***"
    return data


def get_config_value(config: SkylarConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'freshness.weather_minutes'."""
    obj: Any = config
    for part in dotted_key.split("."):
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: SkylarConfig, dotted_key: str, value: Any) -> SkylarConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new SkylarConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        if part not in target:
            raise KeyError(f"Config key not found: {dotted_key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target[parts[-1]]
    if isinstance(old_value, bool) and isinstance(value, str):
        value = value.lower() in ("1", "true", "yes", "on")
    elif isinstance(old_value, int) and isinstance(value, str):
        value = int(value)
    elif isinstance(old_value, float) and isinstance(value, str):
        value = float(value)
    target[parts[-1]] = value
    return SkylarConfig(**data)


def save_config(config: SkylarConfig, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(json.loads(config.model_dump_json()), f, sort_keys=False)
