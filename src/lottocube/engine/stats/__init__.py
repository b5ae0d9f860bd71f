"""Historical statistics cache."""

from .cache import (
    DrawTrends,
    ItemStats,
    StatisticsCache,
    ZoneStats,
    build_statistics,
    zone_index,
)

__all__ = [
    "DrawTrends",
    "ItemStats",
    "StatisticsCache",
    "ZoneStats",
    "build_statistics",
    "zone_index",
]
