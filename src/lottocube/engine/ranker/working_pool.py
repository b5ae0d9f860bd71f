"""Bounded, score-ranked working pool with periodic probability rebalancing."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from lottocube.engine.score.normalizer import PROB_MAX, PROB_MIN, ProbabilityNormalizer

from .scorer import Candidate

logger = logging.getLogger(__name__)


class PoolManager:
    """Keep the best candidates across rounds and spread probability away from overused items."""

    def __init__(
        self,
        max_size: int = 500,
        keep_per_round: int = 10,
        rebalance_interval: int = 10,
        rebalance_window: int = 50,
        overuse_threshold: int | None = None,
        overuse_decay: float = 0.9,
        underuse_boost: float = 1.1,
    ) -> None:
        if max_size <= 0 or keep_per_round <= 0:
            raise ValueError("max_size and keep_per_round must be > 0.")
        if rebalance_interval < 0 or rebalance_window <= 0:
            raise ValueError("rebalance_interval must be >= 0 and rebalance_window > 0.")
        if overuse_decay <= 0 or underuse_boost <= 0:
            raise ValueError("overuse_decay and underuse_boost must be > 0.")

        self.max_size = max_size
        self.keep_per_round = keep_per_round
        self.rebalance_interval = rebalance_interval
        self.rebalance_window = rebalance_window
        self.overuse_threshold = overuse_threshold
        self.overuse_decay = float(overuse_decay)
        self.underuse_boost = float(underuse_boost)
        self._entries: list[Candidate] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[Candidate]:
        return list(self._entries)

    @property
    def best_score(self) -> float:
        return self._entries[0].score if self._entries else 0.0

    def seed(self, candidates: Iterable[Candidate]) -> None:
        """Insert externally supplied candidates without the per-round cap."""
        self._store(list(candidates))

    def merge(self, ranked: list[Candidate]) -> None:
        """Merge the top keep_per_round distinct combinations of an already ranked round batch."""
        top: dict[tuple[int, ...], Candidate] = {}
        for candidate in ranked:
            top.setdefault(candidate.numbers, candidate)
            if len(top) >= self.keep_per_round:
                break
        self._store(list(top.values()))

    def _store(self, candidates: list[Candidate]) -> None:
        best: dict[tuple[int, ...], Candidate] = {entry.numbers: entry for entry in self._entries}
        for candidate in candidates:
            existing = best.get(candidate.numbers)
            if existing is None or candidate.score > existing.score:
                best[candidate.numbers] = candidate
        self._entries = sorted(best.values(), key=lambda item: item.score, reverse=True)[: self.max_size]

    def should_rebalance(self, round_number: int) -> bool:
        return self.rebalance_interval > 0 and round_number % self.rebalance_interval == 0

    def rebalance(self, probabilities: Mapping[int, float], pick: int) -> dict[int, float]:
        """Shrink overused items and lift unused ones across the pool's current top candidates."""
        top = self._entries[: self.rebalance_window]
        if not top:
            return dict(probabilities)

        usage = Counter(number for entry in top for number in entry.numbers)
        threshold = self.overuse_threshold
        if threshold is None:
            threshold = max(1, int(2 * len(top) * pick / len(probabilities)))

        adjusted: dict[int, float] = {}
        overused = unused = 0
        for number, prob in probabilities.items():
            count = usage.get(number, 0)
            if count > threshold:
                prob *= self.overuse_decay
                overused += 1
            elif count == 0:
                prob *= self.underuse_boost
                unused += 1
            adjusted[number] = prob

        adjusted = ProbabilityNormalizer.clamp(adjusted, PROB_MIN, PROB_MAX)
        logger.debug("Rebalanced probabilities: overused=%d unused=%d threshold=%d", overused, unused, threshold)
        return ProbabilityNormalizer.enforce_floor(adjusted)
