"""Canonical historical draw index."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np


def canonicalize(combination: Iterable[int]) -> tuple[int, ...]:
    """Return the sorted, duplicate-free form used for history lookups."""
    return tuple(sorted({int(value) for value in combination}))


class HistorySet:
    """Set of canonicalized historical draws with O(1) exact-match lookup."""

    def __init__(self, historical_draws: Iterable[Sequence[int]] = ()) -> None:
        self._draws = [canonicalize(draw) for draw in historical_draws]
        self._exact = set(self._draws)

    def __len__(self) -> int:
        return len(self._draws)

    def __contains__(self, combination: object) -> bool:
        if not isinstance(combination, Iterable):
            return False
        return canonicalize(combination) in self._exact

    def matches(self, combination: Sequence[int]) -> bool:
        """Return True when the combination equals a past draw as a set."""
        return canonicalize(combination) in self._exact

    @property
    def draws(self) -> list[tuple[int, ...]]:
        """Canonical draws in their original (oldest first) order."""
        return list(self._draws)


def incidence_matrix(history: Sequence[Sequence[int]], valid_pool: Sequence[int]) -> np.ndarray:
    """Return a (draws x items) boolean matrix; numbers outside the pool are ignored."""
    column = {number: idx for idx, number in enumerate(valid_pool)}
    matrix = np.zeros((len(history), len(valid_pool)), dtype=bool)
    for row, draw in enumerate(history):
        for value in draw:
            idx = column.get(int(value))
            if idx is not None:
                matrix[row, idx] = True
    return matrix
