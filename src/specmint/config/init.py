"""Initialization of the specmint configuration directory."""

from pathlib import Path

from specmint.config.loader import get_home_config_path, get_local_config_path, save_config
from specmint.config.schema import DEFAULT_CONFIG


def ensure_specmint_dir(local: bool = False) -> Path:
    """Create the .specmint directory and its templates/ folder.

    Args:
        local: If True, create ./.specmint/ (project-local).
               If False, create ~/.specmint/ (global, default).

    Returns:
        Path to the .specmint directory.
    """
    base = Path.cwd() if local else Path.home()
    specmint_dir = base / ".specmint"
    (specmint_dir / "templates").mkdir(parents=True, exist_ok=True)
    return specmint_dir


def write_default_config(local: bool = False, overwrite: bool = False) -> Path | None:
    """Write the built-in defaults to config.yaml.

    Returns the path written, or None if a config already exists and
    `overwrite` is False.
    """
    ensure_specmint_dir(local)
    path = get_local_config_path() if local else get_home_config_path()
    if path.exists() and not overwrite:
        return None
    save_config(DEFAULT_CONFIG, path)
    return path
