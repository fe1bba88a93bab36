"""
Configuration loader
"""
import os
import yaml
from pathlib import Path
from typing import Optional

from audition.models import Settings


DEFAULT_CONFIG_PATH = "config/settings.yaml"
CONFIG_ENV_VAR = "AUDITION_CONFIG"


def load_config(config_path: str) -> Settings:
    """
    Load settings from YAML file

    Args:
        config_path: Path to config file

    Returns:
        Settings object

    Raises:
        FileNotFoundError: If the config file does not exist
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return Settings(**data)


def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Resolve settings for this process

    Order: explicit path, then $AUDITION_CONFIG, then config/settings.yaml.
    An explicitly requested file must exist; a missing default file just
    means built-in defaults.
    """
    explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return load_config(explicit)

    if Path(DEFAULT_CONFIG_PATH).exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return Settings()
