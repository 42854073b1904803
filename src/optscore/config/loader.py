"""
Configuration Loader Module

Loads the scoring configuration from a YAML file, applies environment
variable overrides and validates the result.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger

from optscore.config.scoring_config import ScoringConfig
from optscore.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path("config/optscore.yaml")


def load_config(
    path: Optional[Union[str, Path]] = None,
    profile: Optional[str] = None,
) -> ScoringConfig:
    """
    Load scoring configuration.

    Args:
        path: YAML file (defaults to config/optscore.yaml)
        profile: Profile name; overrides the file's ``profile`` key

    Returns:
        Validated ScoringConfig

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config_file = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if config_file.exists():
        with open(config_file, "r") as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {config_file} must contain a mapping")
        logger.info(f"Loaded config from {config_file}")
    else:
        if path is not None:
            logger.warning(f"Config file not found: {config_file}, using defaults")
        config_data = {}

    # Env vars take precedence over the file, explicit profile over both
    config_data = merge_config_with_env(config_data)
    if profile is not None:
        config_data["profile"] = profile

    try:
        config = ScoringConfig.from_dict(config_data)
    except TypeError as e:
        raise ConfigurationError(f"Invalid config structure: {e}") from e

    validate_config(config)
    return config


def merge_config_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configuration with environment variables.

    Environment variables override config file settings.

    Examples:
        OPTSCORE_PROFILE=relaxed
        OPTSCORE_SCAN_MIN_VOLUME=100
        OPTSCORE_SCAN_DIRECTION=put

    Args:
        config_data: Configuration data from file

    Returns:
        Merged configuration with env vars applied
    """
    env_mapping = {
        "OPTSCORE_PROFILE": (None, "profile", str),
        "OPTSCORE_SCAN_DTE_MIN": ("scan_filters", "dte_min", int),
        "OPTSCORE_SCAN_DTE_MAX": ("scan_filters", "dte_max", int),
        "OPTSCORE_SCAN_MIN_VOLUME": ("scan_filters", "min_volume", int),
        "OPTSCORE_SCAN_MAX_SPREAD_PCT": ("scan_filters", "max_spread_pct", float),
        "OPTSCORE_SCAN_DIRECTION": ("scan_filters", "direction", str),
        "OPTSCORE_SCAN_TOP_N": ("scan_filters", "top_n", int),
        "OPTSCORE_ACCOUNT_RISK_LIMIT": ("spread_scoring", "account_risk_limit", float),
        "OPTSCORE_REGIME_POINTS_SCALE": ("spread_scoring", "regime_points_scale", float),
    }

    for env_var, (section, key, cast) in env_mapping.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue

        try:
            value = cast(env_value.strip())
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {env_var}: {env_value!r}") from e

        if section is None:
            config_data[key] = value
        else:
            if config_data.get(section) is None:
                config_data[section] = {}
            config_data[section][key] = value

        logger.debug(f"Overriding {section + '.' if section else ''}{key} from env: {env_var}")

    return config_data


def validate_config(config: ScoringConfig) -> bool:
    """
    Validate scoring configuration.

    Returns:
        True if valid

    Raises:
        ConfigurationError: If configuration is invalid
    """
    errors = config.validate()
    if errors:
        error_msg = "Scoring config validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise ConfigurationError(error_msg, errors=errors)

    logger.debug(f"Scoring config valid (profile={config.profile})")
    return True


def save_config(config: ScoringConfig, path: Union[str, Path]) -> Path:
    """Write a configuration to YAML (useful as a starting template)."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w") as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)
    logger.info(f"Saved config to {target}")
    return target
