"""Configuration loading and validation."""

from vfm.config.loader import (
    CONFIG_ENV_VAR,
    ConfigError,
    ConfigErrorCode,
    load_config,
    load_config_from_dict,
    load_config_or_default,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "ConfigErrorCode",
    "load_config",
    "load_config_from_dict",
    "load_config_or_default",
]
