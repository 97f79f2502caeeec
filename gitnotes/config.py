#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import toml
import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("gitnotes")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_dir():
    return Path.home() / '.gitnotes'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GITNOTES_CONFIG environment variable
    2. ~/.gitnotes/config.{json,toml,yaml,yml}
    """
    if 'GITNOTES_CONFIG' in os.environ:
        return Path(os.environ['GITNOTES_CONFIG']).expanduser()

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def read_config_file(config_path=None):
    """Raw contents of the config file ({} when it is missing or unreadable)."""
    config_path = config_path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        suffix = config_path.suffix.lower()
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                return tomllib.load(f)
        elif suffix in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        else:
            with open(config_path, 'r') as f:
                return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Error loading config from {config_path}: {e}")
        return {}


def load_config():
    """Load configuration from file, defaults and environment."""
    config = merge_configs(get_default_config(), read_config_file())
    return apply_env_overrides(config)


def parse_value(value):
    """Typed value for a string given on the command line or in the environment."""
    if value.lower() in ('true', 'yes', 'on'):
        return True
    if value.lower() in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    return value


def set_config_value(key, value):
    """
    Set `section.key` in the config file, leaving other settings as written.

    Returns:
        Path of the saved file

    Raises:
        ValueError: If key is not `section.key` or names an unknown setting
    """
    section, _, name = key.partition('.')
    defaults = get_default_config()
    if not name or name not in defaults.get(section, {}):
        raise ValueError(f"Unknown setting '{key}'")

    file_config = read_config_file()
    file_config.setdefault(section, {})[name] = parse_value(value)
    return save_config(file_config)


def save_config(config):
    """Save configuration to file, in the format its suffix names."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            toml.dump(config, f)
        elif suffix in ['.yaml', '.yml']:
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)

    # The file may hold a token
    config_path.chmod(0o600)
    logger.debug(f"Configuration saved to {config_path}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "github": {
            "token": "",
            "api_url": "https://api.github.com",
            "timeout_seconds": 30,
            "owner": "",
            "repository": "",
            "branch": "main",
            "repository_description": "Notes managed by gitnotes",
        },
        "store": {
            "default_tag_color": "blue",
        },
        "database": {
            "path": "",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s",
        },
    }


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


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GITNOTES_SECTION_KEY
    For example: GITNOTES_GITHUB_TIMEOUT_SECONDS=60
    """
    env_prefix = "GITNOTES_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        typed_value = parse_value(value)

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key matching the remaining parts (keys contain underscores)
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                break

            if i + best_match_len == len(key_parts):
                if not isinstance(current_level[matched_key], dict):
                    current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def configure_logging(config, verbose=False):
    """Apply the logging section to the package logger."""
    log_config = config.get("logging", {})
    level = logging.DEBUG if verbose else getattr(
        logging, str(log_config.get("level", "WARNING")).upper(), logging.WARNING
    )
    logger.setLevel(level)

    fmt = log_config.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))
