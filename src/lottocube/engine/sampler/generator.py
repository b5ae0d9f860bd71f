"""Stochastic candidate assembly biased toward calibrated and high-probability items."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np

from lottocube.engine.history import HistorySet

RETRY_BUDGET = 300
ACCEPTANCE_SCALE = 3.0
RANDOM_SLOT_RATE = 0.5


class CandidateGenerator:
    """Generate batches of sorted, duplicate-free combinations."""

    def __init__(
        self,
        pick: int,
        batch_size: int = 2500,
        top_candidate_pool: int = 15,
        retry_budget: int = RETRY_BUDGET,
    ) -> None:
        if pick <= 0:
            raise ValueError("pick must be > 0.")
        if batch_size <= 0:
            raise ValueError("batch_size must be > 0.")
        if top_candidate_pool <= 0:
            raise ValueError("top_candidate_pool must be > 0.")
        if retry_budget < 0:
            raise ValueError("retry_budget must be >= 0.")

        self.pick = pick
        self.batch_size = batch_size
        self.top_candidate_pool = top_candidate_pool
        self.retry_budget = retry_budget

    def generate_one(
        self,
        numbers: np.ndarray,
        probs: np.ndarray,
        top_items: Sequence[int],
        rng: np.random.Generator,
    ) -> tuple[int, ...]:
        """Assemble one combination from top-item seeds, rejection sampling and uniform fill."""
        chosen: set[int] = set()

        if top_items:
            window = min(self.top_candidate_pool, len(top_items))
            must_count = min(2 + int(rng.integers(0, 2)), self.pick)
            for idx in rng.integers(0, window, size=must_count):
                chosen.add(int(top_items[int(idx)]))

        if len(chosen) < self.pick and rng.random() < RANDOM_SLOT_RATE:
            chosen.add(int(numbers[int(rng.integers(0, len(numbers)))]))

        if len(chosen) < self.pick and self.retry_budget > 0:
            picks = rng.integers(0, len(numbers), size=self.retry_budget)
            accepted = picks[rng.random(self.retry_budget) < probs[picks] * ACCEPTANCE_SCALE]
            for idx in accepted:
                chosen.add(int(numbers[int(idx)]))
                if len(chosen) >= self.pick:
                    break

        if len(chosen) < self.pick:
            remaining = np.array([number for number in numbers if int(number) not in chosen], dtype=np.int64)
            fill = rng.choice(remaining, size=self.pick - len(chosen), replace=False)
            chosen.update(int(number) for number in fill)

        return tuple(sorted(chosen))

    def generate(
        self,
        valid_pool: Sequence[int],
        probabilities: Mapping[int, float],
        top_items: Sequence[int],
        rng: np.random.Generator,
        *,
        history: HistorySet | None = None,
    ) -> list[tuple[int, ...]]:
        """Generate one batch, dropping exact matches of historical draws."""
        if len(valid_pool) < self.pick:
            raise ValueError("valid_pool must contain at least pick numbers.")

        numbers = np.array([int(number) for number in valid_pool], dtype=np.int64)
        probs = np.array([float(probabilities.get(int(number), 0.0)) for number in numbers], dtype=np.float64)

        candidates: list[tuple[int, ...]] = []
        for _ in range(self.batch_size):
            combination = self.generate_one(numbers, probs, top_items, rng)
            if history is not None and history.matches(combination):
                continue
            candidates.append(combination)
        return candidates
