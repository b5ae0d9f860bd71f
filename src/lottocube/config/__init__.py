"""Config loading, schema and presets."""

from .loader import ConfigLoadError, load_config
from .presets import PRESETS, with_preset
from .schema import EngineConfig, build_config

__all__ = [
    "ConfigLoadError",
    "EngineConfig",
    "PRESETS",
    "build_config",
    "load_config",
    "with_preset",
]
