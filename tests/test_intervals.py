"""Tests for exact forward interval propagation."""
from __future__ import annotations

import pytest

from almanac.intervals import (
    lowest_location_by_intervals,
    merge_intervals,
    propagate_interval,
    propagate_through_chain,
)
from almanac.parser import parse
from almanac.resolver import Almanac, resolve_seed_to_location
from almanac.sample import SAMPLE_ALMANAC, SAMPLE_PART1_ANSWER, SAMPLE_PART2_ANSWER
from almanac.search import LocationNotFoundError, SearchConfig, find_lowest_reachable_location
from almanac.types import Category, Interval


@pytest.fixture(scope="module")
def almanac() -> Almanac:
    return parse(SAMPLE_ALMANAC, seed_mode="ranges")


def test_merge_intervals_coalesces_touching_and_overlapping() -> None:
    merged = merge_intervals(
        [Interval(10, 12), Interval(0, 5), Interval(5, 7), Interval(11, 20), Interval(30, 30)],
    )
    assert merged == [Interval(0, 7), Interval(10, 20)]


def test_propagate_interval_splits_at_row_boundaries(almanac: Almanac) -> None:
    table = almanac.map_from(Category.SEED)
    assert table is not None
    pieces = propagate_interval(table, Interval(45, 100))
    assert pieces == [Interval(45, 50), Interval(52, 100), Interval(50, 52)]


def test_chain_image_matches_pointwise_forward(almanac: Almanac) -> None:
    image = propagate_through_chain(almanac, almanac.seed_ranges)
    expected = sorted(
        {
            resolve_seed_to_location(almanac, seed)
            for r in almanac.seed_ranges
            for seed in range(r.start, r.end)
        },
    )
    covered = sorted(v for iv in image for v in range(iv.start, iv.end))
    assert covered == expected


def test_sample_answer(almanac: Almanac) -> None:
    assert lowest_location_by_intervals(almanac) == SAMPLE_PART2_ANSWER


def test_single_seed_ranges_reproduce_part_one(almanac: Almanac) -> None:
    seeds = [Interval(s, s + 1) for s in (79, 14, 55, 13)]
    assert lowest_location_by_intervals(almanac, seeds) == SAMPLE_PART1_ANSWER


def test_agrees_with_scan_on_sample(almanac: Almanac) -> None:
    scan = find_lowest_reachable_location(almanac, config=SearchConfig(workers=1))
    assert lowest_location_by_intervals(almanac) == scan


def test_finds_minimum_above_scan_bound(almanac: Almanac) -> None:
    # Seeds past every map stay put, so the true minimum sits above the scan bound.
    far = [Interval(1000, 1010)]
    assert lowest_location_by_intervals(almanac, far) == 1000
    with pytest.raises(LocationNotFoundError):
        find_lowest_reachable_location(almanac, far, config=SearchConfig(workers=1))


def test_empty_ranges_raise(almanac: Almanac) -> None:
    with pytest.raises(LocationNotFoundError):
        lowest_location_by_intervals(almanac, [Interval(3, 3)])
