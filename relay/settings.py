"""Load application settings from config/settings.yaml."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from relay.events.config import POLL_TIMEOUT_MS, RETENTION_WINDOW_MS, SWEEP_INTERVAL_MS

_DEFAULTS: dict[str, Any] = {
    "broker": {
        "retention_window": RETENTION_WINDOW_MS / 1000,
        "sweep_interval": SWEEP_INTERVAL_MS / 1000,
        "poll_timeout": POLL_TIMEOUT_MS / 1000,
    },
    "logging": {
        "file": "logs/relay.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
        "loggers": {"relay.events": "INFO"},
    },
}

logger = logging.getLogger(__name__)

_CONFIG_DIR_ENV = "RELAY_CONFIG_DIR"

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _defaults() -> dict[str, Any]:
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'broker.poll_timeout')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def reload_settings() -> None:
    """Clear the settings cache."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings.yaml and merge it over the defaults. Result is cached.

    Lookup order for the directory: config_dir argument, $RELAY_CONFIG_DIR,
    then config/ next to the package.
    """
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        env_dir = os.environ.get(_CONFIG_DIR_ENV)
        config_dir = (
            Path(env_dir) if env_dir else Path(__file__).resolve().parent.parent / "config"
        )
    path = config_dir / "settings.yaml"

    result = _defaults()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
