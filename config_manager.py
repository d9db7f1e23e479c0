"""
Configuration management module for the budget cycle engine.

This module handles loading configuration values: the holiday
table, period fallback and exception retention settings, the household
data file location and logging options.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from budget_exceptions import DEFAULT_RETENTION_DAYS
from budget_periods import DEFAULT_FALLBACK_WINDOW_DAYS
from exceptions import ConfigError

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    'holidays': {
        'fixed': ['01-01', '01-06', '04-25', '05-01', '06-02',
                  '08-15', '11-01', '12-08', '12-25', '12-26'],
        'weekend_days': [5, 6],
        'observe_easter': True,
        'observe_easter_monday': True,
    },
    'budget_periods': {
        'fallback_window_days': DEFAULT_FALLBACK_WINDOW_DAYS,
        'exception_retention_days': DEFAULT_RETENTION_DAYS,
    },
    'data': {
        'household_file': 'data/household.yaml',
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file': None,
    },
}

CONFIG_FILE = 'config.yaml'


def _merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Fill missing keys (one level of nesting deep) from defaults."""
    merged = copy.deepcopy(defaults)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    A missing file yields the defaults; an unreadable file is logged and
    also yields the defaults.

    Args:
        config_path: Path to the config file (defaults to config.yaml)

    Returns:
        Configuration dictionary with defaults for missing values
    """
    path = Path(config_path or CONFIG_FILE)
    try:
        if path.exists():
            with open(path, 'r') as f:
                config = yaml.safe_load(f) or {}
        else:
            logger.debug("Config file %s not found; using defaults", path)
            config = {}

        if not isinstance(config, dict):
            raise ConfigError(
                "Configuration root must be a mapping",
                details={"config_path": str(path)}
            )

        merged = _merge_defaults(config, DEFAULT_CONFIG)
        logger.info("Configuration loaded successfully")
        return merged

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error loading configuration: {e}", exc_info=True)
        return copy.deepcopy(DEFAULT_CONFIG)


def get_period_setting(config: Dict[str, Any], key: str) -> int:
    """
    Read a positive integer from the ``budget_periods`` section.

    Raises:
        ConfigError: If the value is not a positive integer
    """
    section = config.get('budget_periods') or {}
    value = section.get(key, DEFAULT_CONFIG['budget_periods'].get(key))
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(
            f"Setting budget_periods.{key} must be a positive integer",
            details={key: value}
        )
    return value
