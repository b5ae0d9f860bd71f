"""Round loop tying the probability model to the generate-and-score search."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

import numpy as np

from lottocube.config.schema import EngineConfig, build_config
from lottocube.engine.events import GenerationObserver, ProgressEvent
from lottocube.engine.history import HistorySet, canonicalize
from lottocube.engine.pool import build_valid_pool, resolve_range
from lottocube.engine.ranker import (
    Candidate,
    ComboScorer,
    Deduplicator,
    PoolManager,
    default_similarity_threshold,
)
from lottocube.engine.sampler import CandidateGenerator, ItemCalibrator
from lottocube.engine.score import ProbabilityModel
from lottocube.engine.stats import StatisticsCache, build_statistics

logger = logging.getLogger(__name__)

ENGINE_VERSION = "2.1.0"


@dataclass(frozen=True)
class RunMeta:
    """Run metadata attached to every result."""

    items: int
    pick: int
    rounds: int
    valid_pool_size: int
    excluded_count: int
    range_start: int
    range_end: int
    elapsed_ms: int
    history_size: int
    generated_at: str
    version: str = ENGINE_VERSION


@dataclass(frozen=True)
class GenerationResult:
    """Ranked recommendations plus everything needed to persist and resume."""

    results: list[tuple[int, ...]]
    scores: list[float]
    prob_map: dict[int, float]
    pool: list[tuple[int, ...]]
    stats: StatisticsCache
    best_score_history: list[float]
    meta: RunMeta

    def to_state(self) -> dict[str, Any]:
        """Subset an external store keeps and feeds back as external_prob_map/initial_pool."""
        return {
            "prob_map": {str(number): prob for number, prob in self.prob_map.items()},
            "pool": [list(numbers) for numbers in self.pool],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [list(numbers) for numbers in self.results],
            "scores": list(self.scores),
            **self.to_state(),
            "stats": self.stats.to_dict(),
            "best_score_history": list(self.best_score_history),
            "meta": asdict(self.meta),
        }


async def generate(
    config: EngineConfig | Mapping[str, Any] | None = None,
    *,
    observer: GenerationObserver | None = None,
    rng: np.random.Generator | None = None,
    **overrides: Any,
) -> GenerationResult:
    """Run the full pipeline and return the final ranked combinations.

    Raises ConfigurationError before any randomized work when the configuration
    is invalid or the valid pool is smaller than the pick count.
    """
    cfg = _resolve_config(config, overrides)
    valid_pool = build_valid_pool(cfg.items, cfg.pick, cfg.range_start, cfg.range_end, cfg.exclude_numbers)
    range_start, range_end = resolve_range(cfg.items, cfg.range_start, cfg.range_end)

    generator = rng if rng is not None else np.random.default_rng(cfg.seed)
    observer = observer or GenerationObserver()
    started = time.perf_counter()

    def elapsed_ms() -> int:
        return int(round((time.perf_counter() - started) * 1000))

    logger.info(
        "Generation started: items=%d pick=%d valid=%d history=%d rounds=%d",
        cfg.items,
        cfg.pick,
        len(valid_pool),
        len(cfg.history),
        cfg.rounds,
    )
    observer.on_progress(ProgressEvent(phase="start", percent=0, message="Building statistics"))

    stats = build_statistics(
        cfg.history,
        valid_pool,
        range_start=range_start,
        range_end=range_end,
        recent_window=cfg.recent_window,
        bonus_history=cfg.bonus_history,
    )
    observer.on_progress(ProgressEvent(phase="stats", percent=2, message="Statistics ready"))

    model = ProbabilityModel(
        pick=cfg.pick,
        decay_rate=cfg.decay_rate,
        learning_rate=cfg.learning_rate,
        persistence_weight=cfg.persistence_weight,
        stats_blend_weight=cfg.stats_blend_weight,
        bonus_weight=cfg.bonus_weight,
    )
    prob_map = model.build(
        valid_pool,
        history=cfg.history,
        stats=stats,
        prior=cfg.external_prob_map,
        rng=generator,
    )
    observer.on_progress(ProgressEvent(phase="model", percent=3, message="Probability model ready"))

    history_set = HistorySet(cfg.history)
    scorer = ComboScorer(stats=stats, zone_balance_weight=cfg.zone_balance_weight)
    pool = PoolManager(
        max_size=cfg.max_pool_size,
        keep_per_round=cfg.keep_per_round,
        rebalance_interval=cfg.rebalance_interval,
        rebalance_window=cfg.rebalance_window,
        overuse_threshold=cfg.overuse_threshold,
        overuse_decay=cfg.overuse_decay,
        underuse_boost=cfg.underuse_boost,
    )
    pool.seed(_seed_candidates(cfg.initial_pool, valid_pool, cfg.pick, prob_map, scorer))

    calibrator = ItemCalibrator(
        evolve_time_ms=cfg.evolve_time_ms,
        loop_min=cfg.loop_min,
        batch=cfg.calibration_batch,
        correction_up=cfg.correction_up,
        correction_down=cfg.correction_down,
        workers=cfg.workers,
    )
    candidate_generator = CandidateGenerator(
        pick=cfg.pick,
        batch_size=cfg.batch_size,
        top_candidate_pool=cfg.top_candidate_pool,
    )
    observer.on_progress(
        ProgressEvent(
            phase="evolving",
            percent=5,
            message="Search started",
            total_rounds=cfg.rounds,
            pool_size=len(pool),
            best_score=pool.best_score,
            elapsed_ms=elapsed_ms(),
        )
    )

    best_scores: list[float] = []
    for round_index in range(cfg.rounds):
        await asyncio.sleep(0)
        round_number = round_index + 1

        calibrations = calibrator.calibrate_all(valid_pool, prob_map, generator)
        top_items = [calibration.number for calibration in calibrations]
        combinations = candidate_generator.generate(
            valid_pool, prob_map, top_items, generator, history=history_set
        )
        pool.merge(scorer.score_many(combinations, prob_map))

        if pool.should_rebalance(round_number):
            prob_map = pool.rebalance(prob_map, cfg.pick)

        best_scores.append(pool.best_score)
        logger.debug(
            "Round %d/%d: candidates=%d pool=%d best=%.3f",
            round_number,
            cfg.rounds,
            len(combinations),
            len(pool),
            pool.best_score,
        )
        observer.on_progress(
            ProgressEvent(
                phase="evolving",
                percent=int(round(5 + (round_number / cfg.rounds) * 95)),
                round=round_number,
                total_rounds=cfg.rounds,
                pool_size=len(pool),
                best_score=pool.best_score,
                elapsed_ms=elapsed_ms(),
            )
        )
        observer.on_round(round_number, pool.best_score)

    observer.on_progress(ProgressEvent(phase="done", percent=100, message="Done", elapsed_ms=elapsed_ms()))

    threshold = min(cfg.pick, cfg.similarity_threshold or default_similarity_threshold(cfg.pick))
    selected = Deduplicator(threshold, history=history_set).select(pool.entries, cfg.result_count)

    result = GenerationResult(
        results=[candidate.numbers for candidate in selected],
        scores=[round(candidate.score, 2) for candidate in selected],
        prob_map=prob_map,
        pool=[candidate.numbers for candidate in pool.entries],
        stats=stats,
        best_score_history=best_scores,
        meta=RunMeta(
            items=cfg.items,
            pick=cfg.pick,
            rounds=cfg.rounds,
            valid_pool_size=len(valid_pool),
            excluded_count=len(cfg.exclude_numbers),
            range_start=range_start,
            range_end=range_end,
            elapsed_ms=elapsed_ms(),
            history_size=len(cfg.history),
            generated_at=datetime.now(timezone.utc).isoformat(),
        ),
    )
    logger.info(
        "Generation finished: results=%d pool=%d elapsed=%dms",
        len(result.results),
        len(result.pool),
        result.meta.elapsed_ms,
    )
    observer.on_complete(result)
    return result


def _resolve_config(config: EngineConfig | Mapping[str, Any] | None, overrides: Mapping[str, Any]) -> EngineConfig:
    if isinstance(config, EngineConfig):
        return config.with_overrides(**overrides) if overrides else config
    return build_config(config, **overrides)


def _seed_candidates(
    initial_pool: tuple[tuple[int, ...], ...],
    valid_pool: tuple[int, ...],
    pick: int,
    prob_map: Mapping[int, float],
    scorer: ComboScorer,
) -> list[Candidate]:
    allowed = set(valid_pool)
    seeded: list[Candidate] = []
    for combination in initial_pool:
        numbers = canonicalize(combination)
        if len(numbers) != pick or not allowed.issuperset(numbers):
            continue
        seeded.append(Candidate(numbers=numbers, score=scorer.score(numbers, prob_map)))

    dropped = len(initial_pool) - len(seeded)
    if dropped:
        logger.warning("Dropped %d seed pool entries outside the valid pool or of the wrong size.", dropped)
    return seeded
