"""
Client and grid configuration loaded from config/jolt.yaml.

Missing file -> defaults. Present file is validated against ``CONFIG_SCHEMA``
and merged over the defaults.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import jsonschema
import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/jolt.yaml"

DEFAULTS: Dict[str, Any] = {
    "endpoint": "",
    "timeout_seconds": 30,
    "retry": {
        "max_retries": 3,
        "initial_backoff_seconds": 1,
    },
    "grid": {
        "chunk_size": 3,
        "chunk_delay_seconds": 0.5,
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "endpoint": {"type": "string"},
        "timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
        "retry": {
            "type": "object",
            "properties": {
                "max_retries": {"type": "integer", "minimum": 1},
                "initial_backoff_seconds": {"type": "number", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "grid": {
            "type": "object",
            "properties": {
                "chunk_size": {"type": "integer", "minimum": 1},
                "chunk_delay_seconds": {"type": "number", "minimum": 0},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigError(Exception):
    """Raised when config/jolt.yaml is invalid."""
    pass


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate a config dict against CONFIG_SCHEMA.

    Raises:
        ConfigError: If validation fails
    """
    try:
        jsonschema.validate(config, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path)
        where = f" at '{path}'" if path else ""
        raise ConfigError(f"Invalid config{where}: {e.message}") from e


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration, preferring the YAML file over defaults.

    Args:
        path: Explicit config path (default: config/jolt.yaml)

    Returns:
        Config dict with defaults filled in

    Raises:
        ConfigError: If the file is not valid YAML or fails validation
    """
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        logger.debug(f"No config at {path}, using defaults")
        return copy.deepcopy(DEFAULTS)

    try:
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping")

    validate_config(raw)
    return _merge(DEFAULTS, raw)
