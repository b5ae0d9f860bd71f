"""Pydantic schema for engine configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lottocube.engine.errors import ConfigurationError


class EngineConfig(BaseModel):
    """Validated, immutable runtime configuration with defaults."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    items: int = Field(default=45, gt=0)
    pick: int = Field(default=6, gt=0)
    range_start: int | None = None
    range_end: int | None = None
    exclude_numbers: frozenset[int] = frozenset()

    history: tuple[tuple[int, ...], ...] = ()
    bonus_history: tuple[int, ...] = ()
    external_prob_map: dict[int, float] | None = None
    initial_pool: tuple[tuple[int, ...], ...] = ()
    persistence_weight: float = Field(default=0.7, ge=0.0, le=1.0)

    decay_rate: float = Field(default=0.18, ge=0.0)
    learning_rate: float = Field(default=0.05, ge=0.0)
    stats_blend_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    recent_window: int = Field(default=20, gt=0)
    bonus_weight: float = Field(default=0.05, ge=0.0)

    evolve_time_ms: float = Field(default=80.0, ge=0.0)
    loop_min: int = Field(default=1000, ge=0)
    calibration_batch: int = Field(default=500, gt=0)
    correction_up: float = Field(default=0.15, ge=0.0, le=1.0)
    correction_down: float = Field(default=0.08, ge=0.0, le=1.0)
    workers: int = Field(default=1, gt=0)

    rounds: int = Field(default=50, ge=0)
    batch_size: int = Field(default=2500, gt=0)
    top_candidate_pool: int = Field(default=15, gt=0)
    zone_balance_weight: float = Field(default=1.0, ge=0.0)

    keep_per_round: int = Field(default=10, gt=0)
    max_pool_size: int = Field(default=500, gt=0)
    rebalance_interval: int = Field(default=10, ge=0)
    rebalance_window: int = Field(default=50, gt=0)
    overuse_threshold: int | None = Field(default=None, ge=0)
    overuse_decay: float = Field(default=0.9, gt=0.0)
    underuse_boost: float = Field(default=1.1, gt=0.0)

    result_count: int = Field(default=5, gt=0)
    similarity_threshold: int | None = Field(default=None, gt=0)
    seed: int | None = None

    def with_overrides(self, **overrides: Any) -> "EngineConfig":
        """Return a new validated config with the given fields overlaid."""
        return build_config({**self.model_dump(), **overrides})


def build_config(options: Mapping[str, Any] | None = None, **overrides: Any) -> EngineConfig:
    """Overlay caller options on the defaults, reporting problems as ConfigurationError."""
    data = {**dict(options or {}), **overrides}
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid engine configuration: {exc}") from exc
