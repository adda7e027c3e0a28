import yaml
import os
import logging
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from mpris_ticker.utils.constants import (
    DEFAULT_COMMAND_ADDRESS, DEFAULT_DISPLAY_FORMAT, DEFAULT_EMPTY_MSG,
    DEFAULT_ICONS, DEFAULT_METADATA_FORMAT, DEFAULT_REFRESH_TICKS,
    DEFAULT_RENDERER, DEFAULT_TICK_INTERVAL, RENDERERS,
)
from mpris_ticker.utils.exceptions import ConfigError

"""
Configuration management for the ticker.

Settings are layered: built-in defaults, then the YAML config file, then
TICKER_* environment variables (a .env file is loaded first if present),
then command line overrides.
"""

logger = logging.getLogger(__name__)

ENV_PREFIX = 'TICKER_'

# Keys that may be set from the environment, with their converters
ENV_KEYS = {
    'display_format': str,
    'metadata_format': str,
    'refresh_ticks': int,
    'tick_interval': float,
    'empty_msg': str,
    'renderer': str,
    'command_address': str,
    'log_level': str,
    'log_file': str,
}


def default_config() -> Dict[str, Any]:
    return {
        'display_format': DEFAULT_DISPLAY_FORMAT,
        'metadata_format': DEFAULT_METADATA_FORMAT,
        'refresh_ticks': DEFAULT_REFRESH_TICKS,
        'tick_interval': DEFAULT_TICK_INTERVAL,
        'empty_msg': DEFAULT_EMPTY_MSG,
        'renderer': DEFAULT_RENDERER,
        'command_address': DEFAULT_COMMAND_ADDRESS,
        'log_level': 'WARNING',
        'log_file': None,
        'icons': dict(DEFAULT_ICONS),
    }


def get_config_path() -> str:
    """
    Locate the YAML config file: $MPRIS_TICKER_CONFIG first, then the XDG
    config directory.
    """
    explicit = os.getenv('MPRIS_TICKER_CONFIG')
    if explicit:
        return explicit
    config_home = os.getenv('XDG_CONFIG_HOME') or os.path.expanduser('~/.config')
    return os.path.join(config_home, 'mpris-ticker', 'config.yaml')


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """
    Read the YAML config file.

    A missing file yields an empty dict. A broken file is logged and
    ignored so the ticker still starts with the remaining layers.
    """
    if not os.path.exists(config_path):
        logger.debug(f"No config file at {config_path}")
        return {}
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading {config_path}: {e}")
        return {}

    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        logger.error(f"Ignoring {config_path}: expected a mapping at top level")
        return {}
    logger.debug(f"Loaded config file {config_path}")
    return yaml_config


def load_env_config() -> Dict[str, Any]:
    env_config = {}
    for key, convert in ENV_KEYS.items():
        raw = os.getenv(ENV_PREFIX + key.upper())
        if raw is None:
            continue
        try:
            env_config[key] = convert(raw)
        except ValueError:
            raise ConfigError(f"{ENV_PREFIX + key.upper()} has an invalid value: {raw!r}")
    return env_config


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    try:
        config['refresh_ticks'] = int(config['refresh_ticks'])
        config['tick_interval'] = float(config['tick_interval'])
    except (TypeError, ValueError):
        raise ConfigError("refresh_ticks and tick_interval must be numbers")

    if config['refresh_ticks'] < 1:
        raise ConfigError("refresh_ticks must be at least 1")
    if config['tick_interval'] <= 0:
        raise ConfigError("tick_interval must be positive")
    if config['renderer'] not in RENDERERS:
        raise ConfigError(f"renderer must be one of {', '.join(RENDERERS)}, got {config['renderer']!r}")
    for key in ('display_format', 'metadata_format', 'empty_msg'):
        if not isinstance(config[key], str):
            raise ConfigError(f"{key} must be a string")
    return config


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> dict:
    """
    Loads the ticker configuration.

    Args:
        config_path: YAML file to read instead of the default location
        overrides: Values from the command line; None values are ignored

    Returns:
        dict: Dictionary containing the ticker configuration

    Raises:
        ConfigError: If a value is invalid
    """
    # Load .env file if it exists
    env_path = os.path.join(os.getcwd(), '.env')
    if os.path.exists(env_path):
        logger.debug(f"Loading .env file from: {env_path}")
        load_dotenv(env_path)

    config = default_config()

    yaml_config = load_yaml_config(config_path or get_config_path())
    icons = yaml_config.pop('icons', None) or {}
    if not isinstance(icons, dict):
        raise ConfigError("icons must be a mapping")
    config['icons'].update(icons)

    unknown = set(yaml_config) - set(config)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
    config.update({k: v for k, v in yaml_config.items() if k in config})

    config.update(load_env_config())
    config.update({k: v for k, v in (overrides or {}).items() if v is not None})

    return validate_config(config)
