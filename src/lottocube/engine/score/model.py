"""Per-item selection probabilities from structure, history, statistics and a carried-over prior."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

import numpy as np
from scipy.special import expit

from lottocube.engine.history import incidence_matrix
from lottocube.engine.stats import StatisticsCache

from .normalizer import PROB_MAX, PROB_MIN, ProbabilityNormalizer

logger = logging.getLogger(__name__)

PRIOR_SCORE_SCALE = 10.0

STAT_WEIGHTS: dict[str, float] = {
    "frequency": 0.20,
    "recent": 0.20,
    "gap": 0.10,
    "reappearance": 0.10,
    "bonus": 0.05,
    "zone_gap": 0.05,
    "zone_trend": 0.10,
    "odd_even": 0.07,
    "ending": 0.06,
    "high_low": 0.07,
}


def base_signal(number: int) -> float:
    """Smooth periodic seed score; only breaks ties between untrained items."""
    return math.sin(number) + math.cos(number / 2)


def trend_signal(ratio: float) -> float:
    """Map a [0.5, 2.0] trend ratio onto [0, 1] with 1.0 -> 0.5."""
    if ratio <= 0:
        return 0.0
    return float(np.clip(0.5 + 0.5 * math.log2(ratio), 0.0, 1.0))


class ProbabilityModel:
    """Blend base signal, recency-weighted logistic fit, statistics and an optional prior."""

    def __init__(
        self,
        *,
        pick: int,
        decay_rate: float = 0.18,
        learning_rate: float = 0.05,
        persistence_weight: float = 0.7,
        stats_blend_weight: float = 0.4,
        bonus_weight: float = STAT_WEIGHTS["bonus"],
    ) -> None:
        if pick <= 0:
            raise ValueError("pick must be > 0.")
        if decay_rate < 0 or learning_rate < 0:
            raise ValueError("decay_rate and learning_rate must be >= 0.")
        if not (0 <= persistence_weight <= 1) or not (0 <= stats_blend_weight <= 1):
            raise ValueError("persistence_weight and stats_blend_weight must be within [0, 1].")
        if bonus_weight < 0:
            raise ValueError("bonus_weight must be >= 0.")

        self.pick = pick
        self.decay_rate = float(decay_rate)
        self.learning_rate = float(learning_rate)
        self.persistence_weight = float(persistence_weight)
        self.stats_blend_weight = float(stats_blend_weight)

        weights = dict(STAT_WEIGHTS)
        weights["bonus"] = float(bonus_weight)
        total = sum(weights.values())
        self.stat_weights = {key: value / total for key, value in weights.items()}

    def raw_scores(
        self,
        valid_pool: Sequence[int],
        history: Sequence[Sequence[int]] = (),
        prior: Mapping[int, float] | None = None,
    ) -> dict[int, float]:
        """Return pre-sigmoid scores after the prior, recency and gradient passes."""
        pool = [int(number) for number in valid_pool]
        raw = np.array([base_signal(number) for number in pool], dtype=np.float64)

        if prior:
            expected = self.pick / len(pool)
            for idx, number in enumerate(pool):
                if number in prior:
                    raw[idx] += (float(prior[number]) - expected) * self.persistence_weight * PRIOR_SCORE_SCALE

        if len(history) > 0:
            matrix = incidence_matrix(history, pool).astype(np.float64)
            distances = np.arange(len(history) - 1, -1, -1, dtype=np.float64)
            recency = np.exp(-self.decay_rate * distances)
            raw += recency @ matrix

            # One logistic-regression style pass per draw, oldest first; not iterated to convergence.
            for row in matrix:
                raw += self.learning_rate * (row - expit(raw))

        return {number: float(score) for number, score in zip(pool, raw)}

    def statistical_probabilities(self, stats: StatisticsCache, valid_pool: Sequence[int]) -> dict[int, float]:
        """Weighted blend of normalized historical signals, each in [0, 1]."""
        pool = [int(number) for number in valid_pool]
        entries = [stats.items[number] for number in pool]

        frequency = _scaled([entry.frequency for entry in entries])
        recent = _scaled([entry.recent_frequency for entry in entries])
        expected_gap = len(pool) / self.pick
        gap = np.minimum(np.array([entry.gap for entry in entries], dtype=np.float64) / (2.0 * expected_gap), 1.0)
        reappearance = np.array([entry.reappearance_rate for entry in entries], dtype=np.float64)
        bonus = _scaled([entry.bonus_frequency for entry in entries])

        max_zone_gap = max((zone.gap for zone in stats.zones), default=0.0)
        zone_gap = np.array(
            [stats.zones[entry.zone].gap / max_zone_gap if max_zone_gap > 0 else 0.0 for entry in entries],
            dtype=np.float64,
        )
        zone_trend = np.array([stats.zones[entry.zone].trend for entry in entries], dtype=np.float64)

        trends = stats.trends
        odd_signal = trend_signal(trends.odd_ratio)
        high_signal = trend_signal(trends.high_ratio)
        midpoint = stats.midpoint
        odd_even = np.array([odd_signal if n % 2 else 1.0 - odd_signal for n in pool], dtype=np.float64)
        ending = np.array([trend_signal(trends.ending_ratios.get(n % 10, 1.0)) for n in pool], dtype=np.float64)
        high_low = np.array([high_signal if n > midpoint else 1.0 - high_signal for n in pool], dtype=np.float64)

        w = self.stat_weights
        combined = (
            w["frequency"] * frequency
            + w["recent"] * recent
            + w["gap"] * gap
            + w["reappearance"] * reappearance
            + w["bonus"] * bonus
            + w["zone_gap"] * zone_gap
            + w["zone_trend"] * zone_trend
            + w["odd_even"] * odd_even
            + w["ending"] * ending
            + w["high_low"] * high_low
        )
        return {number: float(value) for number, value in zip(pool, np.clip(combined, 0.0, 1.0))}

    def build(
        self,
        valid_pool: Sequence[int],
        *,
        history: Sequence[Sequence[int]] = (),
        stats: StatisticsCache | None = None,
        prior: Mapping[int, float] | None = None,
        rng: np.random.Generator,
    ) -> dict[int, float]:
        """Return the normalized probability map for the valid pool."""
        raw = self.raw_scores(valid_pool, history, prior)
        probabilities = {number: float(expit(score)) for number, score in raw.items()}

        if len(history) > 0 and stats is not None and self.stats_blend_weight > 0:
            statistical = self.statistical_probabilities(stats, valid_pool)
            w = self.stats_blend_weight
            probabilities = {
                number: (1.0 - w) * prob + w * statistical[number] for number, prob in probabilities.items()
            }

        if prior:
            p = self.persistence_weight
            for number, prob in probabilities.items():
                if number in prior:
                    blended = float(prior[number]) * p + prob * (1.0 - p)
                    probabilities[number] = min(max(blended, PROB_MIN), PROB_MAX)

        probabilities = ProbabilityNormalizer.scale_to_pick(probabilities, self.pick)
        probabilities = ProbabilityNormalizer.apply_random_floor(probabilities, rng)
        logger.debug(
            "Probability model built: items=%d history=%d prior=%s",
            len(probabilities),
            len(history),
            bool(prior),
        )
        return probabilities


def _scaled(values: Sequence[float]) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    peak = float(array.max()) if array.size else 0.0
    if peak <= 0:
        return np.zeros_like(array)
    return array / peak
