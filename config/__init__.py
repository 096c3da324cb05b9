"""Configuration loading utilities."""

from pathlib import Path
from typing import Any

import yaml

CONFIG_DIR = Path(__file__).parent


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML config file from the config/ directory.

    An empty file loads as an empty dict.
    """
    config_path = CONFIG_DIR / filename
    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
