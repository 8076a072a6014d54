"""Configuration management for hunkpatch.

Handles user-level option defaults stored in ~/.hunkpatch/config.yaml:
- backup: Keep a .orig copy of every patched file
- reverse: Apply patches in reverse by default
- format: Dialect to assume instead of detecting it (normal, unified, context, ed)
- verbose: Log debug information
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hunkpatch.patch.formats import PatchFormat

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when there's an error with the configuration file."""
    pass


_CONFIG_DIR = Path.home() / ".hunkpatch"

# Known keys and the type their values must have
CONFIG_KEYS: Dict[str, type] = {
    "backup": bool,
    "reverse": bool,
    "format": str,
    "verbose": bool,
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "backup": False,
    "reverse": False,
    "format": None,
    "verbose": False,
}

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def get_config_dir() -> Path:
    """Get the hunkpatch configuration directory.

    Returns:
        Path to ~/.hunkpatch/
    """
    return _CONFIG_DIR


def get_config_file_path() -> Path:
    """Get path to config.yaml file.

    Returns:
        Path to ~/.hunkpatch/config.yaml
    """
    return get_config_dir() / "config.yaml"


def _validate(key: str, value: Any) -> Any:
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Unknown configuration key: {key}")
    if value is None:
        return None

    expected = CONFIG_KEYS[key]
    if not isinstance(value, expected):
        raise ConfigError(f"'{key}' must be a {expected.__name__}, got {value!r}")

    if key == "format":
        try:
            PatchFormat(value)
        except ValueError:
            raise ConfigError(f"Invalid format: {value}")
        if value == PatchFormat.NONE.value:
            raise ConfigError(f"Invalid format: {value}")
    return value


def load_config() -> Dict[str, Any]:
    """Load configuration from ~/.hunkpatch/config.yaml merged over the defaults.

    Returns:
        Dictionary with every known key.

    Raises:
        ConfigError: If the file cannot be read or holds invalid values.
    """
    config = dict(DEFAULT_CONFIG)
    config_file = get_config_file_path()

    if not config_file.exists():
        return config

    try:
        with open(config_file, "r") as f:
            stored = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}")

    if not isinstance(stored, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping.")

    for key, value in stored.items():
        config[key] = _validate(key, value)

    logger.debug("Loaded configuration from %s", config_file)
    return config


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to ~/.hunkpatch/config.yaml.

    Args:
        config: Configuration dictionary to save.
    """
    for key, value in config.items():
        _validate(key, value)

    get_config_dir().mkdir(parents=True, exist_ok=True)
    config_file = get_config_file_path()

    try:
        with open(config_file, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to save config to {config_file}: {e}")


def get_default(key: str) -> Any:
    """Get the configured default for one option."""
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Unknown configuration key: {key}")
    return load_config()[key]


def coerce_value(key: str, raw: str) -> Any:
    """Convert a value typed on the command line to the key's type."""
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Unknown configuration key: {key}")

    if CONFIG_KEYS[key] is bool:
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ConfigError(f"'{key}' must be true or false, got {raw!r}")

    if key == "format" and raw.strip().lower() in ("detect", "auto"):
        return None
    return raw.strip()


def set_default(key: str, value: Any) -> None:
    """Set the default for one option and save the file.

    Only keys that differ from the built-in defaults are kept in the file.
    """
    value = _validate(key, value)
    config = load_config()
    config[key] = value

    save_config({k: v for k, v in config.items() if v != DEFAULT_CONFIG[k]})


def resolve_format(name: Optional[str]) -> Optional[PatchFormat]:
    """Turn a format name into a PatchFormat, None meaning detect."""
    if name is None:
        return None
    return PatchFormat(_validate("format", name))
