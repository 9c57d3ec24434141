import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from cerberus import Validator
from pydantic import ValidationError

from .models import PlannerConfig

# Configure logger for this module
logger = logging.getLogger(__name__)

_RANGE_SCHEMA = {
    "type": "dict",
    "schema": {
        "zone_id": {"type": "integer", "required": True},
        "min_salary": {"type": "number", "required": True},
        "max_salary": {"type": "number", "required": True},
        "label": {"type": "string", "required": False, "nullable": True},
        "is_active": {"type": "boolean", "required": False},
    },
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "budget": {
        "type": "dict",
        "required": False,
        "schema": {
            "total": {"type": "number", "required": False},
            "welfare": {"type": "number", "required": False},
        },
    },
    "indirect_cost": {
        "type": "dict",
        "required": False,
        "schema": {
            "retirement": {"type": "number", "required": False},
            "insurance": {"type": "number", "required": False},
            "pension": {"type": "number", "required": False},
            "rate": {"type": "number", "required": False, "nullable": True},
        },
    },
    "additional_type": {
        "type": "string",
        "required": False,
        "allowed": ["percentage", "amount"],
    },
    "fixed_amount_unit": {"type": "number", "required": False},
    "usage_display_ceiling": {"type": "number", "required": False},
    "warning_threshold": {"type": "number", "required": False},
    "danger_threshold": {"type": "number", "required": False},
    "storage_key": {"type": "string", "required": False},
    "pay_zones": {
        "type": "dict",
        "required": False,
        "schema": {
            "mode": {"type": "string", "allowed": ["manual", "range"], "required": False},
            "level_configs": {
                "type": "list",
                "required": False,
                "schema": {
                    "type": "dict",
                    "schema": {
                        # levels often come out of YAML as ints
                        "level": {"type": ["string", "integer"], "required": True},
                        "ranges": {"type": "list", "required": False, "schema": _RANGE_SCHEMA},
                        "default_zone": {"type": "integer", "required": False},
                        "allowed_zones": {
                            "type": "list",
                            "required": False,
                            "schema": {"type": "integer"},
                        },
                    },
                },
            },
        },
    },
}


class ConfigLoadError(Exception):
    """Custom exception for errors during config loading."""

    pass


def load_yaml_config(config_path: Path) -> Optional[Dict[str, Any]]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path object pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration. An empty file
        yields an empty dictionary.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e
    except OSError as e:
        logger.exception(f"Error reading configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error reading config {config_path}") from e

    if config_data is None:
        logger.warning(f"Configuration file {config_path} is empty; using defaults.")
        return {}

    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def parse_planner_config(config_data: Dict[str, Any]) -> PlannerConfig:
    """
    Validates a raw configuration mapping against the schema and builds the
    PlannerConfig model. Raises ConfigLoadError on validation errors.
    """
    v = Validator(CONFIG_SCHEMA)
    if not v.validate(config_data):
        raise ConfigLoadError(f"Config validation failed: {v.errors}")

    data = dict(config_data)
    pay_zones = data.get("pay_zones")
    if isinstance(pay_zones, dict):
        # Normalize level keys to strings so they match roster vocabulary
        data["pay_zones"] = {
            **pay_zones,
            "level_configs": [
                {**level_config, "level": str(level_config["level"])}
                for level_config in pay_zones.get("level_configs", []) or []
            ],
        }

    try:
        config = PlannerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(f"Config validation failed: {e}") from e

    logger.debug(f"Planner configuration parsed: {config}")
    return config


def load_planner_config(config_path: Path) -> PlannerConfig:
    """Loads YAML, validates its schema and returns a PlannerConfig."""
    config_data = load_yaml_config(config_path)
    return parse_planner_config(config_data or {})


# Expose for import
__all__ = [
    "CONFIG_SCHEMA",
    "ConfigLoadError",
    "load_yaml_config",
    "load_planner_config",
    "parse_planner_config",
]
