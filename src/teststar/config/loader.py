from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .schema import Settings

DEFAULT_CONFIG_PATH = Path("config/default.yaml")
CONFIG_PATH_ENV_VAR = "TESTSTAR_CONFIG"
OVERRIDES_ENV_VAR = "TESTSTAR_CONFIG_OVERRIDES"
DATA_DIR_ENV_VAR = "TESTSTAR_DATA_DIR"


def read_yaml(path: Path) -> Dict[str, Any]:
    """Parse a settings file; a blank file yields `{}` and anything but a mapping is rejected."""
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return payload


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay `override` on `base` section by section without mutating either input."""
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Pick the explicit path, then `TESTSTAR_CONFIG`, then `config/default.yaml`."""
    if config_path:
        return Path(config_path)
    env_path = os.getenv(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def env_overrides() -> Dict[str, Any]:
    """
    Collect overrides from the environment.

    `TESTSTAR_CONFIG_OVERRIDES` carries a JSON object merged over the YAML payload;
    `TESTSTAR_DATA_DIR` is a shortcut for `paths.data_dir` and wins over both.
    """
    overrides: Dict[str, Any] = {}
    overrides_env = os.getenv(OVERRIDES_ENV_VAR)
    if overrides_env:
        try:
            overrides = json.loads(overrides_env)
        except json.JSONDecodeError as err:
            raise ValueError(
                f"Failed to parse {OVERRIDES_ENV_VAR} env var as JSON."
            ) from err
        if not isinstance(overrides, dict):
            raise ValueError(f"{OVERRIDES_ENV_VAR} must be a JSON object.")

    data_dir = os.getenv(DATA_DIR_ENV_VAR)
    if data_dir:
        overrides = merge_dicts(overrides, {"paths": {"data_dir": data_dir}})
    return overrides


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Read configuration, apply environment overrides, and return validated Settings.

    Loads the YAML file chosen by `resolve_config_path`, merges `env_overrides` with
    `merge_dicts`, and validates the resulting payload against the `Settings` schema.
    """

    data = read_yaml(resolve_config_path(config_path))
    data = merge_dicts(data, env_overrides())

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    return settings
