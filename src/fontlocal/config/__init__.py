"""Configuration management for fontlocal."""

from fontlocal.config.base import (
    DEFAULT_CONFIG_NAME,
    ConfigError,
    Configurator,
    create_default_config,
    get_config_path,
    load_settings,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ConfigError",
    "Configurator",
    "create_default_config",
    "get_config_path",
    "load_settings",
]
