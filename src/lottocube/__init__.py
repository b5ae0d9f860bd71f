"""lottocube: probability-blended combination search for fixed-size draws."""

from .config import PRESETS, EngineConfig, build_config, load_config, with_preset
from .engine.errors import ConfigurationError
from .engine.events import CallbackObserver, GenerationObserver, ProgressEvent
from .engine.runner import ENGINE_VERSION, GenerationResult, RunMeta, generate

__version__ = ENGINE_VERSION

__all__ = [
    "CallbackObserver",
    "ConfigurationError",
    "EngineConfig",
    "GenerationObserver",
    "GenerationResult",
    "PRESETS",
    "ProgressEvent",
    "RunMeta",
    "build_config",
    "generate",
    "load_config",
    "with_preset",
]
