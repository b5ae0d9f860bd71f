"""Per-item stochastic calibration ("evolution")."""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from lottocube.engine.score.normalizer import PROB_MAX, PROB_MIN

PERTURBATION = 0.05


@dataclass(frozen=True)
class Calibration:
    """Outcome of one item's simulated trial run."""

    number: int
    score: int
    probability: float
    trials: int


class ItemCalibrator:
    """Run Bernoulli trials per item and pull the working probability toward the observed rate."""

    def __init__(
        self,
        evolve_time_ms: float = 80.0,
        loop_min: int = 1000,
        batch: int = 500,
        correction_up: float = 0.15,
        correction_down: float = 0.08,
        workers: int = 1,
    ) -> None:
        if evolve_time_ms < 0 or loop_min < 0:
            raise ValueError("evolve_time_ms and loop_min must be >= 0.")
        if batch <= 0:
            raise ValueError("batch must be > 0.")
        if workers <= 0:
            raise ValueError("workers must be > 0.")

        self.evolve_time_ms = float(evolve_time_ms)
        self.loop_min = int(loop_min)
        self.batch = int(batch)
        self.correction_up = float(correction_up)
        self.correction_down = float(correction_down)
        self.workers = int(workers)

    def calibrate(self, number: int, initial_prob: float, rng: np.random.Generator) -> Calibration:
        """Calibrate a single item using its own generator."""
        factor = rng.uniform(1.0 - PERTURBATION, 1.0 + PERTURBATION)
        adaptive = min(max(initial_prob * factor, PROB_MIN), PROB_MAX)
        successes = 0
        trials = 0

        start = time.perf_counter()
        while (time.perf_counter() - start) * 1000.0 < self.evolve_time_ms or trials < self.loop_min:
            successes += int(np.count_nonzero(rng.random(self.batch) < adaptive))
            trials += self.batch

            rate = successes / trials
            step = self.correction_up if adaptive > rate else self.correction_down
            adaptive += (initial_prob - rate) * step
            adaptive = min(max(adaptive, PROB_MIN), PROB_MAX)

        return Calibration(number=int(number), score=successes, probability=float(adaptive), trials=trials)

    def calibrate_all(
        self,
        valid_pool: Sequence[int],
        probabilities: Mapping[int, float],
        rng: np.random.Generator,
    ) -> list[Calibration]:
        """Calibrate every item and return results ranked by score (descending)."""
        children = rng.spawn(len(valid_pool))
        jobs = [(int(number), float(probabilities[number]), child) for number, child in zip(valid_pool, children)]

        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(lambda job: self.calibrate(*job), jobs))
        else:
            results = [self.calibrate(*job) for job in jobs]

        results.sort(key=lambda item: (-item.score, item.number))
        return results
