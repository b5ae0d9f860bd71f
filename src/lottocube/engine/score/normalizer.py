"""Probability normalization utilities."""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

FLOOR_FRACTION = 0.3
FLOOR_CEILING_FRACTION = 0.5
PROB_MIN = 0.01
PROB_MAX = 0.95


class ProbabilityNormalizer:
    """Scale per-item probabilities to the pick count and keep every item reachable."""

    @staticmethod
    def scale_to_pick(probabilities: Mapping[int, float], pick: int) -> dict[int, float]:
        """Scale so that mean * len == pick, capping each value at 1."""
        if not probabilities:
            raise ValueError("probabilities cannot be empty.")
        if pick <= 0:
            raise ValueError("pick must be > 0.")

        keys = list(probabilities.keys())
        values = np.array([float(probabilities[key]) for key in keys], dtype=np.float64)
        values = np.clip(values, 0.0, None)
        mean = float(values.mean())
        if mean <= 0:
            values = np.full(len(keys), pick / len(keys), dtype=np.float64)
        else:
            values = values * ((pick / len(keys)) / mean)
        values = np.minimum(values, 1.0)
        return {key: float(prob) for key, prob in zip(keys, values)}

    @staticmethod
    def apply_random_floor(
        probabilities: Mapping[int, float],
        rng: np.random.Generator,
        fraction: float = FLOOR_FRACTION,
        ceiling_fraction: float = FLOOR_CEILING_FRACTION,
    ) -> dict[int, float]:
        """Lift values below fraction * mean to a random level in [fraction, ceiling_fraction] * mean."""
        if not probabilities:
            raise ValueError("probabilities cannot be empty.")
        if not (0 <= fraction <= ceiling_fraction <= 1):
            raise ValueError("floor fractions must satisfy 0 <= fraction <= ceiling_fraction <= 1.")

        keys = list(probabilities.keys())
        values = np.array([float(probabilities[key]) for key in keys], dtype=np.float64)
        mean = float(values.mean())
        low = values < fraction * mean
        if low.any():
            values[low] = rng.uniform(fraction, ceiling_fraction, size=int(low.sum())) * mean
        values = ProbabilityNormalizer._lift_floor(values, fraction)
        return {key: float(prob) for key, prob in zip(keys, values)}

    @staticmethod
    def enforce_floor(probabilities: Mapping[int, float], fraction: float = FLOOR_FRACTION) -> dict[int, float]:
        """Deterministically guarantee no value sits below fraction * mean."""
        if not probabilities:
            raise ValueError("probabilities cannot be empty.")
        keys = list(probabilities.keys())
        values = np.array([float(probabilities[key]) for key in keys], dtype=np.float64)
        values = ProbabilityNormalizer._lift_floor(values, fraction)
        return {key: float(prob) for key, prob in zip(keys, values)}

    @staticmethod
    def clamp(
        probabilities: Mapping[int, float], low: float = PROB_MIN, high: float = PROB_MAX
    ) -> dict[int, float]:
        return {key: float(min(max(float(value), low), high)) for key, value in probabilities.items()}

    @staticmethod
    def _lift_floor(values: np.ndarray, fraction: float) -> np.ndarray:
        # Lifting raises the mean, so solve m = (sum_high + k * fraction * m) / n until stable.
        values = values.copy()
        n = len(values)
        for _ in range(n):
            low = values < fraction * values.mean()
            if not low.any():
                break
            high_sum = float(values[~low].sum())
            mean = high_sum / (n - int(low.sum()) * fraction)
            values[low] = min(fraction * mean * (1.0 + 1e-9), 1.0)
        return values
