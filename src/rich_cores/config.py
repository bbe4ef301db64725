"""YAML-based configuration for rich_cores.

A single config file at ``$XDG_CONFIG_HOME/rich-cores/config.yaml`` (or
``~/.config/rich-cores/config.yaml``) is deep-merged over DEFAULT_CONFIG.
Environment variables override individual keys:

- RICH_CORES_THEME: theme name
- RICH_CORES_REFRESH: auto-refresh interval in seconds
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "theme": "default",
    "refresh_seconds": 10,
    "log_max_lines": 200,
    "help_rows_per_column": 4,
    "breadcrumb_separator": ">",
    "max_visible_rows": 200,
    "error_dismiss_seconds": 5,
}


def get_config_dir() -> Path:
    """Get the rich-cores config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "rich-cores"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(cfg: dict[str, Any]) -> dict[str, Any]:
    env_theme = os.environ.get("RICH_CORES_THEME")
    if env_theme:
        cfg["theme"] = env_theme

    env_refresh = os.environ.get("RICH_CORES_REFRESH")
    if env_refresh:
        try:
            seconds = int(env_refresh)
        except ValueError:
            seconds = 0
        if seconds > 0:
            cfg["refresh_seconds"] = seconds
    return cfg


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the config file merged over the defaults.

    A missing, unreadable or malformed file yields the defaults.
    """
    config_path = path or get_config_path()
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            cfg = _deep_merge(cfg, data)
    except FileNotFoundError:
        pass
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Ignoring config %s: %s", config_path, e)
    return _apply_env_overrides(cfg)


def save_config(cfg: dict[str, Any], path: Path | None = None) -> None:
    """Save the config file."""
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(cfg, f, default_flow_style=False, sort_keys=False)
