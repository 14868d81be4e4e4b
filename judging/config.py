"""
Configuration loader
"""
import yaml
from pathlib import Path
from judging.models import Settings


def load_config(config_path: str = "config/judging.yaml") -> Settings:
    """
    Load engine settings from YAML file

    Args:
        config_path: Path to config file

    Returns:
        Settings object

    Raises:
        FileNotFoundError: If config file not found
    """
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return Settings(**data)
