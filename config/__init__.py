"""Configuration loading utilities."""

from pathlib import Path
from typing import Any

import yaml


def load_yaml_config(filename: str | Path, config_dir: Path | None = None) -> dict[str, Any]:
    """Load a YAML config file, relative to the config/ directory by default."""
    config_dir = config_dir or Path(__file__).parent
    config_path = config_dir / filename
    with open(config_path) as f:
        return yaml.safe_load(f) or {}
