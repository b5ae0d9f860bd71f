"""Read engine config files (YAML or JSON), optionally layered on a named preset."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .presets import PRESETS
from .schema import EngineConfig

PRESET_KEY = "preset"


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or parsed."""


def load_config(path: str | Path) -> EngineConfig:
    """Load a config file and validate it with pydantic.

    A top-level ``preset`` key selects one of PRESETS; the remaining keys
    override the preset's fields.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    readers = {".yaml": _read_yaml, ".yml": _read_yaml, ".json": _read_json}
    reader = readers.get(config_path.suffix.lower())
    if reader is None:
        raise ConfigLoadError(
            f"Unsupported config format '{config_path.suffix.lower()}'. Use .yaml/.yml or .json."
        )

    data = reader(config_path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError("Config root must be a JSON/YAML object.")

    preset_name = data.pop(PRESET_KEY, None)
    if preset_name is not None:
        if preset_name not in PRESETS:
            raise ConfigLoadError(f"Unknown preset '{preset_name}' in {config_path}.")
        data = {**PRESETS[preset_name], **data}

    return EngineConfig.model_validate(data)


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as file:
        return yaml.safe_load(file)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as file:
        return json.load(file)
