"""
Configuration utilities for entity-blocking.

Provides configuration loading, validation and logging setup.
"""

import copy
import logging
import yaml
from typing import Dict, Any, Optional
from pathlib import Path

from .processing import ENGINES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/entity_blocking.yaml"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_blocking_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load blocking configuration from YAML file.

    Missing sections are filled from the defaults.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary
    """
    config_file = Path(config_path)
    if not config_file.exists():
        logger.warning(f"Configuration file {config_path} not found, using defaults")
        return get_default_blocking_config()

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"Failed to load configuration from {config_path}: {e}")
        raise

    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping, got {type(config).__name__}")

    logger.info(f"Loaded blocking configuration from {config_path}")
    return merge_configs(get_default_blocking_config(), config)


def get_default_blocking_config() -> Dict[str, Any]:
    """
    Get default blocking configuration.

    Returns:
        Default configuration dictionary
    """
    return {
        "blocking": {
            "engine": "collection",
            "partitions": 1,
            "measure_block_sizes": False,
            "log_largest_blocks": 10
        },
        "logging": {
            "level": "INFO",
            "file": None
        }
    }


def validate_blocking_config(config: Dict[str, Any]) -> bool:
    """
    Validate blocking configuration.

    Args:
        config: Configuration dictionary

    Returns:
        True if configuration is valid, False otherwise
    """
    if "blocking" not in config:
        logger.error("Missing required configuration section: blocking")
        return False

    blocking_config = config.get("blocking", {})
    engine = blocking_config.get("engine", "collection")
    if engine not in ENGINES:
        logger.error(f"blocking.engine must be one of {list(ENGINES)}, got '{engine}'")
        return False

    partitions = blocking_config.get("partitions", 1)
    if not isinstance(partitions, int) or isinstance(partitions, bool) or partitions < 1:
        logger.error("blocking.partitions must be a positive integer")
        return False

    if not isinstance(blocking_config.get("measure_block_sizes", False), bool):
        logger.error("blocking.measure_block_sizes must be a boolean")
        return False

    largest = blocking_config.get("log_largest_blocks", 10)
    if not isinstance(largest, int) or isinstance(largest, bool) or largest < 0:
        logger.error("blocking.log_largest_blocks must be a non-negative integer")
        return False

    level = config.get("logging", {}).get("level", "INFO")
    if not isinstance(logging.getLevelName(str(level).upper()), int):
        logger.error(f"logging.level '{level}' is not a valid logging level")
        return False

    logger.debug("Configuration validation passed")
    return True


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configuration dictionaries.

    Args:
        base_config: Base configuration
        override_config: Override configuration

    Returns:
        Merged configuration
    """
    merged = copy.deepcopy(base_config)

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def save_blocking_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save blocking configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration
    """
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, indent=2)

    logger.info(f"Saved configuration to {config_path}")


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up root logging for applications using entity-blocking.

    Args:
        level: Logging level name
        log_file: Optional file receiving log output in addition to stderr
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, str(level).upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
