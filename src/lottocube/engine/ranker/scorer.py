"""Combination scoring."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from lottocube.engine.features import calculate_ac_value, count_adjacent_pairs
from lottocube.engine.stats import StatisticsCache

PROBABILITY_SCALE = 100.0
DISPERSION_WEIGHT = 0.5
BALANCED_ZONE_BONUS = 10.0
SPREAD_ZONE_BONUS = 3.0
CROWDED_ZONE_PENALTY = -5.0
SINGLE_ZONE_PENALTY = -10.0
MAX_PER_ZONE = 3
ZONE_TREND_SCALE = 5.0
AC_ALIGNMENT_BONUS = 5.0
ADJACENCY_ALIGNMENT_BONUS = 3.0
SUM_ALIGNMENT_BONUS = 5.0


@dataclass(frozen=True)
class Candidate:
    """Scored combination."""

    numbers: tuple[int, ...]
    score: float


class ComboScorer:
    """Score = probability mass + dispersion + weighted zone/trend alignment terms."""

    def __init__(self, stats: StatisticsCache | None = None, zone_balance_weight: float = 1.0) -> None:
        if zone_balance_weight < 0:
            raise ValueError("zone_balance_weight must be >= 0.")
        self.stats = stats
        self.zone_balance_weight = float(zone_balance_weight)

    def score(self, combination: Sequence[int], probabilities: Mapping[int, float]) -> float:
        numbers = tuple(sorted(int(value) for value in combination))
        score = PROBABILITY_SCALE * sum(float(probabilities.get(number, 0.0)) for number in numbers)
        score += DISPERSION_WEIGHT * float(np.std(numbers))
        if self.stats is not None and self.zone_balance_weight > 0:
            score += self.zone_balance_weight * self.pattern_bonus(numbers)
        return score

    def pattern_bonus(self, numbers: tuple[int, ...]) -> float:
        """Zone distribution plus trend-alignment terms."""
        stats = self.stats
        if stats is None:
            return 0.0

        zones = [stats.zone_of(number) for number in numbers]
        bonus = self.zone_distribution_bonus(zone.index for zone in zones)
        bonus += sum((zone.trend - 0.5) * 2.0 * ZONE_TREND_SCALE for zone in zones)

        trends = stats.trends
        if not trends.available:
            return bonus

        if abs(calculate_ac_value(numbers) - trends.recent_ac) <= 1:
            bonus += AC_ALIGNMENT_BONUS
        if abs(count_adjacent_pairs(numbers) - trends.recent_adjacency) <= 1:
            bonus += ADJACENCY_ALIGNMENT_BONUS
        if trends.recent_sum > 0:
            closeness = max(0.0, 1.0 - abs(sum(numbers) - trends.recent_sum) / trends.recent_sum)
            bonus += SUM_ALIGNMENT_BONUS * closeness
        return bonus

    @staticmethod
    def zone_distribution_bonus(zone_indices) -> float:
        counts = Counter(zone_indices)
        if not counts:
            return 0.0
        if len(counts) == 1:
            return SINGLE_ZONE_PENALTY
        if max(counts.values()) > MAX_PER_ZONE:
            return CROWDED_ZONE_PENALTY
        if 3 <= len(counts) <= 4:
            return BALANCED_ZONE_BONUS
        return SPREAD_ZONE_BONUS

    def score_many(
        self,
        combinations: Sequence[Sequence[int]],
        probabilities: Mapping[int, float],
    ) -> list[Candidate]:
        """Score combinations and return them ranked by score (descending)."""
        scored = [
            Candidate(numbers=tuple(sorted(int(value) for value in combination)), score=self.score(combination, probabilities))
            for combination in combinations
        ]
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored
