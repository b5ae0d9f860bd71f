from __future__ import annotations

import numpy as np
import pytest

from lottocube.engine.score.normalizer import ProbabilityNormalizer


def test_scale_to_pick_matches_pick_count():
    probabilities = ProbabilityNormalizer.scale_to_pick({1: 0.2, 2: 0.4, 3: 0.6, 4: 0.8}, pick=2)

    assert sum(probabilities.values()) == pytest.approx(2.0)
    assert probabilities[4] > probabilities[1]


def test_scale_to_pick_caps_at_one():
    probabilities = ProbabilityNormalizer.scale_to_pick({1: 0.9, 2: 0.01, 3: 0.01}, pick=2)

    assert max(probabilities.values()) <= 1.0


def test_random_floor_keeps_every_value_above_thirty_percent_of_mean():
    raw = {number: 0.001 for number in range(1, 30)}
    raw.update({30: 0.9, 31: 0.95, 32: 0.99})

    probabilities = ProbabilityNormalizer.apply_random_floor(raw, np.random.default_rng(3))
    values = np.array(list(probabilities.values()))

    assert values.min() >= 0.3 * values.mean()
    assert values.max() <= 1.0


def test_random_floor_is_reproducible_with_same_seed():
    raw = {1: 0.01, 2: 0.02, 3: 0.9, 4: 0.8}

    first = ProbabilityNormalizer.apply_random_floor(raw, np.random.default_rng(11))
    second = ProbabilityNormalizer.apply_random_floor(raw, np.random.default_rng(11))

    assert first == second


def test_enforce_floor_is_a_no_op_when_satisfied():
    probabilities = {1: 0.5, 2: 0.4, 3: 0.3}
    assert ProbabilityNormalizer.enforce_floor(probabilities) == probabilities


def test_clamp_bounds_values():
    clamped = ProbabilityNormalizer.clamp({1: -0.5, 2: 0.5, 3: 2.0})
    assert clamped == {1: 0.01, 2: 0.5, 3: 0.95}


def test_empty_input_rejected():
    with pytest.raises(ValueError, match="cannot be empty"):
        ProbabilityNormalizer.scale_to_pick({}, pick=1)
