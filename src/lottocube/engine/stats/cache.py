"""Per-item historical aggregates and multi-window trend signals."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field

import numpy as np
import pandas as pd

from lottocube.engine.features import draw_features, ending_digits
from lottocube.engine.history import incidence_matrix

logger = logging.getLogger(__name__)

ZONE_COUNT = 5
ZONE_WINDOW = 100
ZONE_TREND_WINDOW = 20
ZONE_TREND_CLAMP = 1.0
DRAW_TREND_WINDOW = 50
MIN_TREND_HISTORY = 10
RATIO_MIN = 0.5
RATIO_MAX = 2.0
NEUTRAL_TREND = 0.5
NEUTRAL_RATIO = 1.0


@dataclass(frozen=True)
class ItemStats:
    """Historical aggregates for a single number."""

    number: int
    frequency: int
    recent_frequency: int
    gap: int
    reappearances: int
    zone: int
    bonus_frequency: int = 0

    @property
    def reappearance_rate(self) -> float:
        if self.frequency <= 0:
            return 0.0
        return self.reappearances / self.frequency


@dataclass(frozen=True)
class ZoneStats:
    """Aggregates for one contiguous numeric zone."""

    index: int
    start: int
    end: int
    frequency: int
    gap: float
    trend: float = NEUTRAL_TREND


@dataclass(frozen=True)
class DrawTrends:
    """Recent-vs-preceding window ratios of draw-level patterns."""

    available: bool = False
    odd_ratio: float = NEUTRAL_RATIO
    ac_ratio: float = NEUTRAL_RATIO
    adjacency_ratio: float = NEUTRAL_RATIO
    sum_ratio: float = NEUTRAL_RATIO
    high_ratio: float = NEUTRAL_RATIO
    ending_ratios: dict[int, float] = field(
        default_factory=lambda: {digit: NEUTRAL_RATIO for digit in range(10)}
    )
    recent_ac: float = 0.0
    recent_adjacency: float = 0.0
    recent_sum: float = 0.0
    window: int = 0


@dataclass(frozen=True)
class StatisticsCache:
    """Statistics computed once per run from the historical draws."""

    items: dict[int, ItemStats]
    zones: tuple[ZoneStats, ...]
    trends: DrawTrends
    history_size: int
    range_start: int
    range_end: int

    @property
    def midpoint(self) -> float:
        return (self.range_start + self.range_end) / 2.0

    def zone_of(self, number: int) -> ZoneStats:
        """Return the zone containing the number."""
        entry = self.items.get(int(number))
        if entry is not None:
            return self.zones[entry.zone]
        return self.zones[zone_index(number, self.range_start, self.range_end, len(self.zones))]

    def to_dict(self) -> dict[str, object]:
        return {
            "history_size": self.history_size,
            "range_start": self.range_start,
            "range_end": self.range_end,
            "items": {str(number): asdict(stats) for number, stats in self.items.items()},
            "zones": [asdict(zone) for zone in self.zones],
            "trends": {
                **{key: value for key, value in asdict(self.trends).items() if key != "ending_ratios"},
                "ending_ratios": {str(digit): ratio for digit, ratio in self.trends.ending_ratios.items()},
            },
        }


def zone_index(number: int, range_start: int, range_end: int, zone_count: int = ZONE_COUNT) -> int:
    """Map a number to one of zone_count equal-width zones over the range."""
    span = range_end - range_start + 1
    offset = min(max(int(number) - range_start, 0), span - 1)
    return min(zone_count - 1, offset * zone_count // span)


def build_statistics(
    history: Sequence[Sequence[int]],
    valid_pool: Sequence[int],
    *,
    range_start: int,
    range_end: int,
    recent_window: int = 20,
    bonus_history: Iterable[int] = (),
) -> StatisticsCache:
    """Build the statistics cache for the valid pool from oldest-first draws."""
    if recent_window <= 0:
        raise ValueError("recent_window must be > 0.")

    draws = [tuple(int(value) for value in draw) for draw in history]
    total = len(draws)
    pool = [int(number) for number in valid_pool]
    matrix = incidence_matrix(draws, pool)

    frequency = matrix.sum(axis=0)
    recent = matrix[-recent_window:].sum(axis=0)
    gaps = _gaps(matrix)
    if total > 1:
        reappearances = (matrix[1:] & matrix[:-1]).sum(axis=0)
    else:
        reappearances = np.zeros(len(pool), dtype=np.int64)
    bonus_counts = Counter(int(value) for value in bonus_history)

    zone_count = min(ZONE_COUNT, range_end - range_start + 1)
    zone_ids = np.array([zone_index(number, range_start, range_end, zone_count) for number in pool], dtype=np.int64)
    zones = _zone_stats(matrix, zone_ids, zone_count, range_start, range_end)
    trends = _draw_trends(draws, midpoint=(range_start + range_end) / 2.0)

    items = {
        number: ItemStats(
            number=number,
            frequency=int(frequency[idx]),
            recent_frequency=int(recent[idx]),
            gap=int(gaps[idx]),
            reappearances=int(reappearances[idx]),
            zone=int(zone_ids[idx]),
            bonus_frequency=int(bonus_counts.get(number, 0)),
        )
        for idx, number in enumerate(pool)
    }

    logger.debug(
        "Statistics built: history=%d items=%d zones=%d trends=%s",
        total,
        len(items),
        zone_count,
        "on" if trends.available else "neutral",
    )
    return StatisticsCache(
        items=items,
        zones=zones,
        trends=trends,
        history_size=total,
        range_start=range_start,
        range_end=range_end,
    )


def _gaps(matrix: np.ndarray) -> np.ndarray:
    """Draws since last occurrence per column; the row count when never seen."""
    total, width = matrix.shape
    if total == 0:
        return np.zeros(width, dtype=np.int64)
    seen = matrix.any(axis=0)
    since_last = np.argmax(matrix[::-1], axis=0)
    return np.where(seen, since_last, total).astype(np.int64)


def _zone_stats(
    matrix: np.ndarray,
    zone_ids: np.ndarray,
    zone_count: int,
    range_start: int,
    range_end: int,
) -> tuple[ZoneStats, ...]:
    total = matrix.shape[0]
    window = matrix[-ZONE_WINDOW:]
    window_gaps = _gaps(window)

    bounds: dict[int, list[int]] = {}
    for number in range(range_start, range_end + 1):
        bounds.setdefault(zone_index(number, range_start, range_end, zone_count), []).append(number)

    trend_window = min(ZONE_TREND_WINDOW, total // 2) if total >= MIN_TREND_HISTORY else 0

    zones: list[ZoneStats] = []
    for index in range(zone_count):
        members = zone_ids == index
        numbers = bounds.get(index, [range_start])
        if members.any():
            zone_frequency = int(window[:, members].sum())
            zone_gap = float(window_gaps[members].mean())
        else:
            zone_frequency = 0
            zone_gap = float(len(window))

        trend = NEUTRAL_TREND
        if trend_window > 0 and members.any():
            recent_rate = matrix[-trend_window:, members].sum() / trend_window
            previous_rate = matrix[-2 * trend_window : -trend_window, members].sum() / trend_window
            delta = float(np.clip(recent_rate - previous_rate, -ZONE_TREND_CLAMP, ZONE_TREND_CLAMP))
            trend = 0.5 + delta / (2.0 * ZONE_TREND_CLAMP)

        zones.append(
            ZoneStats(
                index=index,
                start=min(numbers),
                end=max(numbers),
                frequency=zone_frequency,
                gap=zone_gap,
                trend=trend,
            )
        )
    return tuple(zones)


def _draw_trends(draws: Sequence[tuple[int, ...]], midpoint: float) -> DrawTrends:
    total = len(draws)
    if total < MIN_TREND_HISTORY:
        return DrawTrends()

    window = min(DRAW_TREND_WINDOW, total // 2)
    features = pd.DataFrame([draw_features(draw, midpoint) for draw in draws])
    recent = features.tail(window).mean()
    previous = features.iloc[-2 * window : -window].mean()

    endings = pd.DataFrame([Counter(ending_digits(draw)) for draw in draws])
    endings = endings.reindex(columns=range(10)).fillna(0.0)
    sizes = features["size"].where(features["size"] > 0, 1.0)
    shares = endings.div(sizes, axis=0)
    recent_shares = shares.tail(window).mean()
    previous_shares = shares.iloc[-2 * window : -window].mean()

    return DrawTrends(
        available=True,
        odd_ratio=_ratio(recent["odd"], previous["odd"]),
        ac_ratio=_ratio(recent["ac"], previous["ac"]),
        adjacency_ratio=_ratio(recent["adjacent"], previous["adjacent"]),
        sum_ratio=_ratio(recent["total"], previous["total"]),
        high_ratio=_ratio(recent["high"], previous["high"]),
        ending_ratios={digit: _ratio(recent_shares[digit], previous_shares[digit]) for digit in range(10)},
        recent_ac=float(recent["ac"]),
        recent_adjacency=float(recent["adjacent"]),
        recent_sum=float(recent["total"]),
        window=window,
    )


def _ratio(recent: float, previous: float) -> float:
    recent = float(recent)
    previous = float(previous)
    if previous <= 0:
        return NEUTRAL_RATIO if recent <= 0 else RATIO_MAX
    return float(np.clip(recent / previous, RATIO_MIN, RATIO_MAX))
