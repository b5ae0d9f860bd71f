"""Valid item pool construction."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import ConfigurationError


def resolve_range(items: int, range_start: int | None = None, range_end: int | None = None) -> tuple[int, int]:
    """Return the effective inclusive range, defaulting to 1..items."""
    start = range_start if range_start is not None else 1
    end = range_end if range_end is not None else items
    return int(start), int(end)


def build_valid_pool(
    items: int,
    pick: int,
    range_start: int | None = None,
    range_end: int | None = None,
    exclude: Iterable[int] = (),
) -> tuple[int, ...]:
    """Return ascending numbers in range that are not excluded."""
    start, end = resolve_range(items, range_start, range_end)
    excluded = {int(value) for value in exclude}
    pool = tuple(number for number in range(start, end + 1) if number not in excluded)

    if len(pool) < pick:
        raise ConfigurationError(
            f"Not enough valid numbers: need {pick}, available {len(pool)} "
            f"(range {start}~{end}, excluded {len(excluded)})."
        )
    return pool
