"""CLI configuration management with XDG-compliant storage."""

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "server_url": "http://localhost:5000",
    "poll_interval": 5,
    "cache_ttl_hours": 24,
    "offline_ttl_days": 7,
}


def get_config_dir() -> Path:
    """Get XDG-compliant config directory for wandergo.

    Honors $XDG_CONFIG_HOME when it is set.

    Returns:
        Path to ~/.config/wandergo/
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    config_dir = Path(config_home) / "wandergo"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file() -> Path:
    """Get path to config file.

    Returns:
        Path to ~/.config/wandergo/config.json
    """
    return get_config_dir() / "config.json"


def load_config() -> dict[str, Any]:
    """Load configuration from file.

    Returns:
        Dictionary of configuration values, or empty dict if the file is
        missing or unreadable.
    """
    config_file = get_config_file()
    if not config_file.exists():
        return {}

    try:
        with config_file.open("r") as f:
            data: dict[str, Any] = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, e)
        return {}
    return data


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file.

    Args:
        config: Dictionary of configuration values to save.
    """
    config_file = get_config_file()
    with config_file.open("w") as f:
        json.dump(config, f, indent=2)


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a single configuration value.

    Falls back to the built-in default for known keys when ``default``
    is not given.
    """
    config = load_config()
    if default is None:
        default = DEFAULTS.get(key)
    return config.get(key, default)


def get_float_value(key: str, default: float) -> float:
    """Get a numeric configuration value.

    ``config set`` stores strings, so values are coerced here. An
    unparseable value yields ``default``.
    """
    value = get_config_value(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def set_config_value(key: str, value: Any) -> None:
    """Set a single configuration value.

    Args:
        key: Configuration key to set.
        value: Value to store.
    """
    config = load_config()
    config[key] = value
    save_config(config)
