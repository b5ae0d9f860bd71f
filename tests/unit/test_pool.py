from __future__ import annotations

import pytest

from lottocube.engine.errors import ConfigurationError
from lottocube.engine.pool import build_valid_pool, resolve_range


def test_default_range_is_one_to_items():
    assert build_valid_pool(items=10, pick=3) == tuple(range(1, 11))
    assert resolve_range(10) == (1, 10)


def test_range_and_exclusions_are_applied():
    pool = build_valid_pool(items=45, pick=6, range_start=5, range_end=20, exclude=[7, 8, 30])

    assert pool == tuple(sorted(pool))
    assert all(5 <= number <= 20 for number in pool)
    assert not {7, 8, 30}.intersection(pool)
    assert len(pool) == 14


def test_pool_smaller_than_pick_raises():
    with pytest.raises(ConfigurationError, match="Not enough valid numbers"):
        build_valid_pool(items=5, pick=6)


def test_exclusions_can_shrink_pool_below_pick():
    with pytest.raises(ConfigurationError):
        build_valid_pool(items=8, pick=6, exclude=[1, 2, 3])
