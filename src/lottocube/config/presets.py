"""Named parameter overlays for common draw formats."""

from __future__ import annotations

from typing import Any

from lottocube.engine.errors import ConfigurationError

from .schema import EngineConfig, build_config

PRESETS: dict[str, dict[str, Any]] = {
    "lotto645": {"items": 45, "pick": 6, "similarity_threshold": 5, "evolve_time_ms": 80, "rounds": 50, "batch_size": 2500},
    "lotto638": {"items": 38, "pick": 6, "similarity_threshold": 5, "evolve_time_ms": 80, "rounds": 50, "batch_size": 2500},
    "powerball": {"items": 69, "pick": 5, "similarity_threshold": 4, "evolve_time_ms": 100, "rounds": 60, "batch_size": 3000},
    "megamillions": {"items": 70, "pick": 5, "similarity_threshold": 4, "evolve_time_ms": 100, "rounds": 60, "batch_size": 3000},
    "euromillions": {"items": 50, "pick": 5, "similarity_threshold": 4, "evolve_time_ms": 90, "rounds": 55, "batch_size": 2800},
    "keno": {"items": 80, "pick": 20, "similarity_threshold": 15, "evolve_time_ms": 150, "rounds": 40, "batch_size": 3500},
    "fast": {"items": 45, "pick": 6, "evolve_time_ms": 20, "rounds": 5, "batch_size": 500},
    "custom": {},
}


def with_preset(name: str, **overrides: Any) -> EngineConfig:
    """Build a config from a named preset with caller fields overlaid."""
    if name not in PRESETS:
        raise ConfigurationError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}.")
    return build_config(PRESETS[name], **overrides)
