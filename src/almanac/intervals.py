"""Exact forward propagation of seed ranges through the category chain.

Each stage splits an interval wherever its constant-offset run ends, so the
location intervals produced are exactly the image of the seed ranges. The
smallest start among them is the true minimum location, with no scan bound
involved. The scan in ``almanac.search`` stays the default; this path is an
opt-in strategy and a cross-check for it.
"""

from __future__ import annotations

from collections.abc import Iterable

from almanac.range_map import CategoryRangeMap
from almanac.resolver import ASCENDING, Almanac
from almanac.search import LocationNotFoundError, location_upper_bound
from almanac.types import Interval


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """Sort and coalesce overlapping or touching intervals; drops empty ones."""
    rows = sorted((iv for iv in intervals if not iv.is_empty()), key=lambda iv: iv.start)
    merged: list[Interval] = []
    for iv in rows:
        if merged and iv.start <= merged[-1].end:
            last = merged[-1]
            if iv.end > last.end:
                merged[-1] = Interval(last.start, iv.end)
            continue
        merged.append(iv)
    return merged


def propagate_interval(table: CategoryRangeMap, interval: Interval) -> list[Interval]:
    """Image of ``interval`` under ``table``, one piece per offset run."""
    pieces: list[Interval] = []
    value = interval.start
    while value < interval.end:
        mapped, run_length = table.destination_run(value)
        span = min(run_length, interval.end - value)
        pieces.append(Interval.from_length(mapped, span))
        value += span
    return pieces


def propagate_through_chain(almanac: Almanac, intervals: Iterable[Interval]) -> list[Interval]:
    current = merge_intervals(intervals)
    for category in ASCENDING:
        table = almanac.maps[category]
        if table is None:
            continue
        current = merge_intervals(
            piece for iv in current for piece in propagate_interval(table, iv)
        )
    return current


def lowest_location_by_intervals(
    almanac: Almanac,
    seed_ranges: Iterable[Interval] | None = None,
) -> int:
    """Smallest location reachable from ``seed_ranges`` by interval arithmetic.

    Raises:
        LocationNotFoundError: if every seed range is empty.
    """
    ranges = almanac.seed_ranges if seed_ranges is None else tuple(seed_ranges)
    locations = propagate_through_chain(almanac, ranges)
    if not locations:
        raise LocationNotFoundError(location_upper_bound(almanac))
    return locations[0].start
