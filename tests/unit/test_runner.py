from __future__ import annotations

import asyncio
import itertools

import numpy as np
import pytest

from lottocube import CallbackObserver, ConfigurationError, EngineConfig, generate

FAST = {
    "evolve_time_ms": 0,
    "loop_min": 500,
    "batch_size": 200,
    "rounds": 3,
    "seed": 11,
}


def _run(config=None, **kwargs):
    return asyncio.run(generate(config, **kwargs))


class _ExplodingRng:
    def __getattr__(self, name):
        raise AssertionError(f"random generator used before validation: {name}")


def test_small_universe_returns_distinct_combinations():
    result = _run({"items": 10, "pick": 3, "result_count": 5, **FAST})

    assert len(result.results) == 5
    assert len(set(result.results)) == 5
    for numbers in result.results:
        assert len(numbers) == 3
        assert list(numbers) == sorted(set(numbers))
        assert all(1 <= number <= 10 for number in numbers)
    assert result.scores == sorted(result.scores, reverse=True)


def test_pick_larger_than_universe_fails_before_random_work():
    with pytest.raises(ConfigurationError, match="Not enough valid numbers"):
        _run({"items": 5, "pick": 6}, rng=_ExplodingRng())


def test_exclusions_shrinking_pool_below_pick_fail():
    with pytest.raises(ConfigurationError):
        _run({"items": 8, "pick": 6, "exclude_numbers": [1, 2, 3]}, rng=_ExplodingRng())


def test_invalid_option_is_configuration_error():
    with pytest.raises(ConfigurationError):
        _run({"items": 45, "rounds": -1})


def test_results_never_repeat_history_and_respect_exclusions():
    history = [combo for combo in itertools.combinations(range(1, 7), 3) if 1 in combo]
    result = _run(
        {"items": 7, "pick": 3, "history": history, "exclude_numbers": [7], "result_count": 3, **FAST}
    )

    drawn = {tuple(sorted(combo)) for combo in history}
    assert result.results
    for numbers in result.results:
        assert numbers not in drawn
        assert 7 not in numbers
    assert all(7 not in numbers for numbers in result.pool)


def test_range_restricts_the_valid_pool():
    result = _run({"items": 45, "pick": 6, "range_start": 10, "range_end": 30, **FAST})

    assert set(result.prob_map) == set(range(10, 31))
    assert all(10 <= number <= 30 for numbers in result.results for number in numbers)
    assert result.meta.valid_pool_size == 21


def test_probability_map_stays_bounded_after_rebalancing():
    result = _run({"items": 45, "pick": 6, "rebalance_interval": 1, **FAST})

    values = np.array(list(result.prob_map.values()))
    assert np.all((values >= 0.0) & (values <= 1.0))
    assert values.min() >= 0.3 * values.mean()


def test_pool_is_bounded():
    result = _run({"items": 45, "pick": 6, "max_pool_size": 12, "keep_per_round": 10, **FAST})

    assert len(result.pool) <= 12
    assert len(set(result.pool)) == len(result.pool)


def test_same_seed_is_reproducible():
    config = {"items": 45, "pick": 6, **FAST}

    first = _run(config)
    second = _run(config)

    assert first.prob_map == second.prob_map
    assert first.results == second.results


def test_prob_map_is_identical_without_rounds():
    config = {"items": 30, "pick": 5, "rounds": 0, "seed": 3}
    assert _run(config).prob_map == _run(config).prob_map


def test_progress_checkpoints_in_order():
    events = []
    rounds = []
    completed = []
    observer = CallbackObserver(
        on_progress=events.append,
        on_round=lambda number, best: rounds.append((number, best)),
        on_complete=completed.append,
    )

    result = _run({"items": 20, "pick": 4, **FAST}, observer=observer)

    phases = [(event.phase, event.percent) for event in events]
    assert phases[:4] == [("start", 0), ("stats", 2), ("model", 3), ("evolving", 5)]
    assert phases[-1] == ("done", 100)
    assert [event.round for event in events if event.phase == "evolving"][1:] == [1, 2, 3]
    assert events[-2].percent == 100
    assert [number for number, _ in rounds] == [1, 2, 3]
    assert [best for _, best in rounds] == result.best_score_history
    assert completed == [result]


def test_concurrent_runs_interleave_once_per_round():
    order = []

    def observer(name):
        return CallbackObserver(on_round=lambda number, best: order.append((name, number)))

    async def both():
        config = EngineConfig(items=20, pick=4, **FAST)
        await asyncio.gather(
            generate(config, observer=observer("a")),
            generate(config, observer=observer("b")),
        )

    asyncio.run(both())

    assert order == [("a", 1), ("b", 1), ("a", 2), ("b", 2), ("a", 3), ("b", 3)]


def test_seed_pool_is_scored_and_invalid_entries_are_dropped():
    initial_pool = [(6, 5, 4, 3, 2, 1), (1, 2, 3), (40, 41, 42, 43, 44, 46)]
    result = _run({"items": 45, "pick": 6, "rounds": 0, "initial_pool": initial_pool, "seed": 1})

    assert result.pool == [(1, 2, 3, 4, 5, 6)]
    assert result.results == [(1, 2, 3, 4, 5, 6)]


def test_external_prob_map_biases_probabilities():
    prior = {number: 0.05 for number in range(1, 46)}
    prior[17] = 0.9
    result = _run({"items": 45, "pick": 6, "rounds": 0, "external_prob_map": prior, "seed": 2})

    assert result.prob_map[17] == max(result.prob_map.values())


def test_engine_config_with_keyword_overrides():
    config = EngineConfig(items=12, pick=3)
    result = _run(config, result_count=2, **FAST)

    assert result.meta.items == 12
    assert len(result.results) == 2


def test_state_and_dict_payloads():
    result = _run({"items": 15, "pick": 3, **FAST})

    state = result.to_state()
    assert set(state) == {"prob_map", "pool"}
    assert all(isinstance(key, str) for key in state["prob_map"])
    assert state["pool"][0] == list(result.pool[0])

    payload = result.to_dict()
    assert payload["results"] == [list(numbers) for numbers in result.results]
    assert payload["meta"]["pick"] == 3
    assert payload["meta"]["version"] == result.meta.version
    assert len(payload["stats"]["items"]) == 15
    assert len(payload["best_score_history"]) == 3
