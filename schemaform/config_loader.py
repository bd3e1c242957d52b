"""
Configuration loading utilities for the form model.

This module provides functionality to load and validate form model
configuration (validation limits, logging) with fallback to defaults.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationLoadError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 20

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ValidationSettings(BaseModel):
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)


class LoggingSettings(BaseModel):
    level: str = 'INFO'
    format: str = LOG_FORMAT

    @field_validator('level')
    @classmethod
    def check_level(cls, v: str) -> str:
        if v.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Unknown logging level: {v}")
        return v.upper()


class FormModelSettings(BaseModel):
    """Structural model of the configuration file."""
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default form model configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'validation': {
            'max_depth': DEFAULT_MAX_DEPTH
        },
        'logging': {
            'level': 'INFO',
            'format': LOG_FORMAT
        }
    }


def load_config(config_path: Optional[Path] = None, strict: bool = False) -> Dict[str, Any]:
    """
    Load form model configuration, merged over the defaults.

    Missing, empty, unparsable or invalid files fall back to the defaults
    unless strict is set.

    Args:
        config_path: Optional path to config file (defaults to schemaform.yaml)
        strict: Raise instead of falling back when an existing file cannot be used

    Returns:
        Complete configuration dictionary

    Raises:
        ConfigurationLoadError: In strict mode, if the file is unreadable, unparsable or invalid
    """
    if config_path is None:
        config_path = Path("schemaform.yaml")
    config_path = Path(config_path)

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return default_config

        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            if strict:
                raise ConfigurationLoadError(config_path, TypeError("configuration must be a mapping"))
            logger.info("Using default configuration")
            return default_config

        config = deep_merge(default_config, user_config)

        if not validate_config(config):
            if strict:
                raise ConfigurationLoadError(config_path, ValueError("invalid configuration values"))
            logger.info("Using default configuration")
            return default_config

        logger.info(f"Successfully loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        if strict:
            raise ConfigurationLoadError(config_path, e) from e
        logger.info("Using default configuration")
        return default_config

    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        if strict:
            raise ConfigurationLoadError(config_path, e) from e
        logger.info("Using default configuration")
        return default_config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and value types.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    try:
        FormModelSettings.model_validate(config)
        return True
    except ValidationError as e:
        for error in e.errors():
            location = '.'.join(str(part) for part in error['loc'])
            logger.warning(f"Invalid configuration value at {location}: {error['msg']}")
        return False


def get_config_value(config: Optional[Dict[str, Any]], section: str, key: str,
                     default: Any = None) -> Any:
    """
    Read a single setting, falling back to the default configuration.

    Args:
        config: Configuration dictionary (None means defaults)
        section: Top-level section name
        key: Key within the section
        default: Value returned when neither config nor defaults define it

    Returns:
        The configured value
    """
    source = config if config is not None else get_default_config()
    section_values = source.get(section)
    if isinstance(section_values, dict) and key in section_values:
        return section_values[key]
    return get_default_config().get(section, {}).get(key, default)


def get_logging_level(level_str: str) -> int:
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


def setup_logging(config: Optional[Dict[str, Any]] = None) -> int:
    """
    Configure the root logger from the 'logging' section.

    Args:
        config: Configuration dictionary (None means defaults)

    Returns:
        The numeric logging level applied
    """
    level_str = get_config_value(config, 'logging', 'level', 'INFO')
    log_format = get_config_value(config, 'logging', 'format', LOG_FORMAT)
    level = get_logging_level(level_str)
    logging.basicConfig(level=level, format=log_format)
    logger.info(f"Logging configured to level: {level_str}")
    return level
