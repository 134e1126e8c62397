"""Configuration file loading and merging."""

import logging
import os
from pathlib import Path

import yaml

from specmint.config.schema import DEFAULT_CONFIG, SpecmintConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"
MODEL_ENV_VAR = "SPECMINT_ENRICHMENT_MODEL"


def get_home_config_path() -> Path:
    """Get path to global config: ~/.specmint/config.yaml."""
    return Path.home() / ".specmint" / CONFIG_FILENAME


def get_local_config_path() -> Path:
    """Get path to local config: ./.specmint/config.yaml."""
    return Path.cwd() / ".specmint" / CONFIG_FILENAME


def home_config_exists() -> bool:
    """Check if the global home config exists."""
    return get_home_config_path().exists()


def local_config_exists() -> bool:
    """Check if the local project config exists."""
    return get_local_config_path().exists()


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found, empty or invalid."""
    if not path.exists():
        return None
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    result: dict[str, object] = data
    return result


def load_config() -> SpecmintConfig:
    """Load merged configuration.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. Global config (~/.specmint/config.yaml)
    3. Local config (./.specmint/config.yaml)
    4. SPECMINT_ENRICHMENT_MODEL environment variable

    Returns merged SpecmintConfig.
    """
    config = DEFAULT_CONFIG

    home_data = load_yaml_config(get_home_config_path())
    if home_data:
        config = config.merge(SpecmintConfig.from_dict(home_data))

    local_data = load_yaml_config(get_local_config_path())
    if local_data:
        config = config.merge(SpecmintConfig.from_dict(local_data))

    env_model = os.environ.get(MODEL_ENV_VAR)
    if env_model:
        config = config.merge(SpecmintConfig(enrichment_model=env_model))

    return config


def save_config(config: SpecmintConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with path.open("w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
