from __future__ import annotations

import pytest

from lottocube.engine.features import (
    calculate_ac_value,
    count_adjacent_pairs,
    count_high,
    count_odd,
    ending_digits,
)
from lottocube.engine.stats import build_statistics, zone_index
from lottocube.engine.stats.cache import MIN_TREND_HISTORY


def _build(history, pool=tuple(range(1, 11)), **kwargs):
    return build_statistics(history, pool, range_start=pool[0], range_end=pool[-1], **kwargs)


def test_repeated_draw_gives_zero_gap_and_full_frequency():
    history = [(1, 2, 3)] * 12
    stats = _build(history)

    assert stats.items[1].gap == 0
    assert stats.items[1].frequency == len(history)
    assert stats.items[1].reappearances == len(history) - 1


def test_never_seen_number_gap_equals_history_length():
    history = [(1, 2, 3), (2, 3, 4), (1, 5, 6)]
    stats = _build(history)

    assert stats.items[10].frequency == 0
    assert stats.items[10].gap == len(history)
    assert stats.items[2].gap == 1
    assert stats.items[1].gap == 0
    assert stats.items[4].gap == 1


def test_recent_frequency_uses_recent_window():
    history = [(1, 2, 3)] * 5 + [(4, 5, 6)] * 3
    stats = _build(history, recent_window=3)

    assert stats.items[1].recent_frequency == 0
    assert stats.items[4].recent_frequency == 3
    assert stats.items[1].frequency == 5


def test_unknown_numbers_are_not_credited():
    stats = _build([(1, 2, 99), (-4, 2, 3)])

    assert 99 not in stats.items
    assert stats.items[2].frequency == 2
    assert stats.history_size == 2


def test_bonus_history_is_counted():
    stats = _build([(1, 2, 3)], bonus_history=[7, 7, 9])

    assert stats.items[7].bonus_frequency == 2
    assert stats.items[9].bonus_frequency == 1
    assert stats.items[1].bonus_frequency == 0


def test_zones_partition_the_range():
    stats = _build([])

    assert len(stats.zones) == 5
    assert [zone.index for zone in stats.zones] == list(range(5))
    assert stats.zones[0].start == 1
    assert stats.zones[-1].end == 10
    assert stats.zone_of(1).index == 0
    assert stats.zone_of(10).index == 4
    assert zone_index(23, 1, 45, 5) == 2


def test_trends_are_neutral_with_short_history():
    stats = _build([(1, 2, 3)] * (MIN_TREND_HISTORY - 1))

    assert not stats.trends.available
    assert stats.trends.odd_ratio == 1.0
    assert all(ratio == 1.0 for ratio in stats.trends.ending_ratios.values())
    assert all(zone.trend == 0.5 for zone in stats.zones)


def test_zone_trend_tracks_shift_between_windows():
    history = [(1, 2, 3)] * 20 + [(8, 9, 10)] * 20
    stats = _build(history)

    assert stats.zone_of(1).trend < 0.5
    assert stats.zone_of(9).trend > 0.5
    assert all(0.0 <= zone.trend <= 1.0 for zone in stats.zones)


def test_draw_trend_ratios_are_clamped():
    history = [(2, 4, 6)] * 20 + [(1, 3, 5)] * 20
    stats = _build(history)

    assert stats.trends.available
    assert stats.trends.odd_ratio == pytest.approx(2.0)
    assert 0.5 <= stats.trends.sum_ratio <= 2.0
    assert stats.trends.recent_sum == pytest.approx(9.0)
    assert stats.trends.ending_ratios[1] == pytest.approx(2.0)
    assert stats.trends.ending_ratios[2] == pytest.approx(0.5)


def test_to_dict_is_json_friendly():
    payload = _build([(1, 2, 3)] * 12).to_dict()

    assert payload["history_size"] == 12
    assert payload["items"]["1"]["frequency"] == 12
    assert set(payload["trends"]["ending_ratios"]) == {str(digit) for digit in range(10)}


def test_draw_feature_helpers():
    combo = (1, 2, 3, 10, 21, 44)

    assert calculate_ac_value((1, 2, 3, 4, 5, 6)) == 0
    assert calculate_ac_value((1, 3, 8)) == 1
    assert count_adjacent_pairs(combo) == 2
    assert count_odd(combo) == 3
    assert count_high(combo, midpoint=23) == 1
    assert ending_digits(combo) == [1, 2, 3, 0, 1, 4]
