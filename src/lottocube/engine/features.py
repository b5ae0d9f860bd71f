"""Draw-level pattern features shared by statistics and scoring."""

from __future__ import annotations

from collections.abc import Sequence
from itertools import combinations


def _numbers(combination: Sequence[int]) -> tuple[int, ...]:
    return tuple(sorted({int(value) for value in combination}))


def calculate_ac_value(combination: Sequence[int]) -> int:
    """Arithmetic complexity: distinct pairwise differences minus (k - 1)."""
    numbers = _numbers(combination)
    if len(numbers) < 2:
        return 0
    differences = {b - a for a, b in combinations(numbers, 2)}
    return len(differences) - (len(numbers) - 1)


def count_odd(combination: Sequence[int]) -> int:
    return sum(1 for number in _numbers(combination) if number % 2 == 1)


def count_adjacent_pairs(combination: Sequence[int]) -> int:
    """Number of consecutive-value pairs, e.g. (7, 8)."""
    numbers = _numbers(combination)
    return sum(1 for a, b in zip(numbers, numbers[1:]) if b - a == 1)


def count_high(combination: Sequence[int], midpoint: float) -> int:
    """Number of values strictly above the range midpoint."""
    return sum(1 for number in _numbers(combination) if number > midpoint)


def ending_digits(combination: Sequence[int]) -> list[int]:
    return [number % 10 for number in _numbers(combination)]


def draw_features(combination: Sequence[int], midpoint: float) -> dict[str, float]:
    """Return the per-draw feature row used for trend windows."""
    numbers = _numbers(combination)
    return {
        "odd": float(count_odd(numbers)),
        "ac": float(calculate_ac_value(numbers)),
        "adjacent": float(count_adjacent_pairs(numbers)),
        "total": float(sum(numbers)),
        "high": float(count_high(numbers, midpoint)),
        "size": float(len(numbers)),
    }
