"""
Configuration for demoversions.

Configuration is a plain dict built in layers:
1. Built-in defaults (get_default_config)
2. Optional file (.github/demo-config.json/.toml/.yaml)
3. DEMOVERSIONS_* environment variables

The result is validated once in load_config and then passed explicitly to
services and commands. Nothing here caches a loaded config.
"""

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import logging
import sys

import toml
import yaml

from .domain.semver import compare, parse
from .exit_codes import ConfigError

logger = logging.getLogger("demoversions")

ENV_PREFIX = "DEMOVERSIONS_"
CONFIG_ENV_VAR = "DEMOVERSIONS_CONFIG"
CONFIG_DIR = Path('.github')
CONFIG_FILENAMES = ['demo-config.json', 'demo-config.toml', 'demo-config.yaml', 'demo-config.yml']

DEFAULT_DIST_TAGS = ['latest', 'next', 'beta', 'alpha', 'canary']


def configure_logging(level: str = "INFO", fmt: str = "%(levelname)s: %(message)s") -> None:
    """Send demoversions logs to stderr, keeping stdout for data."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    logger.handlers = [handler]
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    logger.propagate = False


def get_config_path(start: Optional[Path] = None) -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. DEMOVERSIONS_CONFIG environment variable
    2. .github/demo-config.{json,toml,yaml,yml} under ``start`` (default: cwd)
    """
    if CONFIG_ENV_VAR in os.environ:
        path = Path(os.environ[CONFIG_ENV_VAR])
        if path.exists():
            return path
        logger.debug(f"{CONFIG_ENV_VAR} points to missing file {path}")

    base = Path(start) if start else Path.cwd()
    for filename in CONFIG_FILENAMES:
        path = base / CONFIG_DIR / filename
        if path.exists():
            return path

    # If no file exists, return default path for saving
    return base / CONFIG_DIR / CONFIG_FILENAMES[0]


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "examples": {
            "exclude": [],
            "order": [],
            "minimum_version": "0.1.0",
        },
        "deployment": {
            "base_path": "",
            "pages_dir": "gh-pages",
            "dist_tags": list(DEFAULT_DIST_TAGS),
        },
        "gc": {
            "retain_dist_tag_versions": True,
        },
        "git": {
            "timeout_seconds": 30,
            "parallel": 1,
        },
        "npm": {
            "package": "",
            "registry_url": "https://registry.npmjs.org",
            "timeout_seconds": 10,
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s",
        },
    }


# Expected type of every leaf in the default config, used by validate_config
CONFIG_SCHEMA = {
    "examples": {"exclude": list, "order": list, "minimum_version": str},
    "deployment": {"base_path": str, "pages_dir": str, "dist_tags": list},
    "gc": {"retain_dist_tag_versions": bool},
    "git": {"timeout_seconds": int, "parallel": int},
    "npm": {"package": str, "registry_url": str, "timeout_seconds": int},
    "logging": {"level": str, "format": str},
}


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                data = tomllib.load(f)
        elif suffix in ('.yaml', '.yml'):
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f)
        else:
            with open(config_path, 'r') as f:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping at top level")
    return data


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Load configuration from file, environment and defaults.

    Args:
        path: Explicit config file; discovered with get_config_path if None
        environ: Environment mapping (default: os.environ)

    Raises:
        ConfigError: if the file is unreadable or a value has the wrong type
    """
    config_path = Path(path) if path else get_config_path()
    config = get_default_config()

    if config_path.exists():
        config = merge_configs(config, _read_config_file(config_path))
        logger.debug(f"Loaded config from {config_path}")
    elif path:
        raise ConfigError(f"Config file not found: {config_path}")

    config = apply_env_overrides(config, environ)
    validate_config(config)
    return config


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """Save configuration to file, choosing the format from the suffix."""
    config_path = Path(path) if path else get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            toml.dump(config, f)
        elif suffix in ('.yaml', '.yml'):
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)
            f.write('\n')

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def _coerce_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    if value.startswith('['):
        try:
            return json.loads(value)
        except ValueError:
            return value
    return value


def apply_env_overrides(config, environ: Optional[Mapping[str, str]] = None):
    """
    Apply environment variable overrides to configuration.

    Environment variables follow the pattern DEMOVERSIONS_SECTION_KEY, for
    example DEMOVERSIONS_GIT_TIMEOUT_SECONDS=60. Keys containing
    underscores are matched greedily against the existing config keys.
    JSON arrays are accepted for list values.
    """
    environ = os.environ if environ is None else environ

    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_ENV_VAR:
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')
        typed_value = _coerce_env_value(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                logger.debug(f"Ignoring unknown config override {env_key}")
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check value types against CONFIG_SCHEMA.

    Unknown keys are allowed; known keys must have the expected type.

    Raises:
        ConfigError: naming the first offending key
    """
    for section, fields in CONFIG_SCHEMA.items():
        values = config.get(section)
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")
        for key, expected in fields.items():
            if key not in values:
                continue
            value = values[key]
            # bool is a subclass of int; don't let True pass as a number
            if expected is int and isinstance(value, bool):
                raise ConfigError(f"Config value '{section}.{key}' must be an integer")
            if not isinstance(value, expected):
                raise ConfigError(
                    f"Config value '{section}.{key}' must be of type {expected.__name__}, "
                    f"got {type(value).__name__}"
                )
            if expected is list and not all(isinstance(item, str) for item in value):
                raise ConfigError(f"Config value '{section}.{key}' must be a list of strings")

    if config["git"].get("parallel", 1) < 1:
        raise ConfigError("Config value 'git.parallel' must be at least 1")


def ordered_examples(config: Dict[str, Any], available: Iterable[str]) -> List[str]:
    """
    Order example names for building and display.

    Excluded examples are dropped, names from ``examples.order`` come first
    in that order, and the rest follow alphabetically.
    """
    exclude = set(config["examples"]["exclude"])
    order = config["examples"]["order"]

    enabled = [name for name in available if name not in exclude]
    ordered = [name for name in order if name in enabled]
    rest = sorted(name for name in enabled if name not in order)
    return ordered + rest


def meets_minimum_version(config: Dict[str, Any], version: str) -> bool:
    """Check a version against ``examples.minimum_version``."""
    minimum = config["examples"]["minimum_version"]
    parsed, floor = parse(version), parse(minimum)
    if parsed is None or floor is None:
        logger.warning(f"Failed to parse version '{version}' or minimum '{minimum}'")
        return False
    return compare(parsed, floor) >= 0
