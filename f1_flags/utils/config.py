"""
Configuration Utilities

Loads and manages configuration from config/settings.yaml
"""

import os
import copy
import logging
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

# Default configuration
DEFAULT_CONFIG = {
    "telemetry": {
        "host": "127.0.0.1",
        "port": 20888,
        "buffer_size": 2048,
        "timeout": 1.0
    },
    "output": {
        "destination": None
    },
    "flags": {
        "penalty_show_seconds": 2.0
    },
    "logging": {
        "level": "INFO"
    }
}


def default_config_path() -> str:
    """Return config/settings.yaml relative to the project root."""
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(project_root, "config", "settings.yaml")


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge overrides into a copy of base.

    Nested dicts are merged key by key; everything else is replaced.
    An empty section (None in YAML) keeps the defaults for that section.
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if value is None and isinstance(merged.get(key), dict):
            logger.warning(f"Config section '{key}' is empty. Using defaults.")
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Values in the file override DEFAULT_CONFIG; missing keys keep their
    defaults.

    Args:
        config_path: Path to config file. If None, looks in config/settings.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = default_config_path()

    if not os.path.exists(config_path):
        logger.info("No config file found. Using defaults.")
        return copy.deepcopy(DEFAULT_CONFIG)

    logger.info(f"Loading config from {config_path}")
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config: {e}. Using defaults.")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(loaded, dict):
        logger.warning(f"Config file {config_path} is not a mapping. Using defaults.")
        return copy.deepcopy(DEFAULT_CONFIG)

    return merge_config(DEFAULT_CONFIG, loaded)


def save_config(config: Dict[str, Any], config_path: str = None):
    """
    Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save to
    """
    if config_path is None:
        config_path = default_config_path()

    os.makedirs(os.path.dirname(config_path), exist_ok=True)

    with open(config_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False)

    logger.info(f"Config saved to {config_path}")
