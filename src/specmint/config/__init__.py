"""Configuration and preflight checks."""

from specmint.config.loader import (
    home_config_exists,
    load_config,
    local_config_exists,
    save_config,
)
from specmint.config.schema import DEFAULT_CONFIG, SpecmintConfig

__all__ = [
    "DEFAULT_CONFIG",
    "SpecmintConfig",
    "home_config_exists",
    "load_config",
    "local_config_exists",
    "save_config",
]
