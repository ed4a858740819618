"""Almanac container and single-value resolution through the category chain."""

from __future__ import annotations

from dataclasses import dataclass

from almanac.range_map import CategoryRangeMap
from almanac.types import U64_END, Category, SeedMode, SeedRange


# Walk orders over the chain. Location has no outgoing map, so it is skipped.
ASCENDING: tuple[Category, ...] = tuple(c for c in Category if c is not Category.LOCATION)
DESCENDING: tuple[Category, ...] = tuple(reversed(ASCENDING))


@dataclass(frozen=True, slots=True)
class Almanac:
    """Parsed almanac: seed data plus one optional outgoing map per category.

    ``maps`` is indexed by ``Category``; slot ``c`` holds the map whose source
    is ``c``. Empty slots resolve by identity.
    """

    seed_mode: SeedMode
    seeds: tuple[int, ...]
    seed_ranges: tuple[SeedRange, ...]
    maps: tuple[CategoryRangeMap | None, ...]

    def __post_init__(self) -> None:
        if len(self.maps) != len(Category):
            raise ValueError(f"maps must have {len(Category)} slots, got {len(self.maps)}")
        for category, table in zip(Category, self.maps):
            if table is not None and table.source is not category:
                raise ValueError(f"map {table.name} stored in slot {category}")
        if self.seed_mode == "values" and self.seed_ranges:
            raise ValueError("seed_ranges must be empty when seed_mode is 'values'")
        if self.seed_mode == "ranges" and self.seeds:
            raise ValueError("seeds must be empty when seed_mode is 'ranges'")

    def map_from(self, category: Category) -> CategoryRangeMap | None:
        return self.maps[category]

    def present_maps(self) -> list[CategoryRangeMap]:
        return [m for m in self.maps if m is not None]

    def location_map(self) -> CategoryRangeMap | None:
        return self.maps[Category.HUMIDITY]


def resolve_seed_to_location(almanac: Almanac, seed: int) -> int:
    value = seed
    for category in ASCENDING:
        table = almanac.maps[category]
        if table is not None:
            value = table.destination_for(value)
    return value


def resolve_location_to_seed(almanac: Almanac, location: int) -> int:
    value = location
    for category in DESCENDING:
        table = almanac.maps[category]
        if table is not None:
            value = table.source_for(value)
    return value


def resolve_location_run(almanac: Almanac, location: int) -> tuple[int, int]:
    """Reverse-resolve ``location`` and report how far the offset holds.

    Returns ``(seed, run_length)`` such that for every ``0 <= k < run_length``
    ``resolve_location_to_seed(almanac, location + k) == seed + k``.
    """
    value = location
    run_length: int | None = None
    for category in DESCENDING:
        table = almanac.maps[category]
        if table is None:
            continue
        value, stage_run = table.source_run(value)
        run_length = stage_run if run_length is None else min(run_length, stage_run)
    if run_length is None:
        # No maps at all: the whole tail of the domain is one identity run.
        run_length = U64_END - location
    return value, run_length


def trace_seed(almanac: Almanac, seed: int) -> list[tuple[Category, int]]:
    """Return the value held at every category while resolving ``seed``."""
    value = seed
    steps: list[tuple[Category, int]] = [(Category.SEED, value)]
    for category in ASCENDING:
        table = almanac.maps[category]
        if table is not None:
            value = table.destination_for(value)
        successor = category.successor()
        assert successor is not None
        steps.append((successor, value))
    return steps


def lowest_location_for_seeds(almanac: Almanac, seeds: tuple[int, ...] | None = None) -> int:
    """Smallest location reached by forward-resolving explicit seeds."""
    candidates = almanac.seeds if seeds is None else seeds
    if not candidates:
        raise ValueError("no explicit seeds to resolve")
    return min(resolve_seed_to_location(almanac, seed) for seed in candidates)
