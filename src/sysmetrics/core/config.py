"""Configuration loading and saving utilities.

Supports YAML and JSON configuration files with schema validation.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml

from sysmetrics.core.schemas import ExporterConfig


def load_config(path: Path | str) -> ExporterConfig:
    """Load and validate an exporter configuration file.

    Args:
        path: Path to YAML or JSON configuration file

    Returns:
        Validated ExporterConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported
        pydantic.ValidationError: If config is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, encoding="utf-8") as f:
        if suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    # An empty YAML document means "all defaults"
    return ExporterConfig.model_validate(data or {})


def save_config(config: ExporterConfig, path: Path | str) -> None:
    """Write a configuration to YAML or JSON, chosen by file suffix.

    Args:
        config: Configuration to serialize
        path: Destination file

    Raises:
        ValueError: If file format is unsupported
    """
    path = Path(path)
    data = config.model_dump(mode="json")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(data, sort_keys=False)
    elif suffix == ".json":
        text = json.dumps(data, indent=2)
    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
