"""Almanac range-remapping engine: parsing, resolution and lowest-location search."""

from almanac.intervals import lowest_location_by_intervals
from almanac.parser import ParseError, parse
from almanac.range_map import CategoryRangeMap
from almanac.resolver import (
    Almanac,
    lowest_location_for_seeds,
    resolve_location_to_seed,
    resolve_seed_to_location,
    trace_seed,
)
from almanac.search import (
    DomainError,
    LocationNotFoundError,
    SearchConfig,
    find_lowest_reachable_location,
    location_upper_bound,
)
from almanac.types import Category, CategoryRange, Interval, SeedMode, SeedRange

__all__ = [
    "Almanac",
    "Category",
    "CategoryRange",
    "CategoryRangeMap",
    "DomainError",
    "Interval",
    "LocationNotFoundError",
    "ParseError",
    "SearchConfig",
    "SeedMode",
    "SeedRange",
    "find_lowest_reachable_location",
    "location_upper_bound",
    "lowest_location_by_intervals",
    "lowest_location_for_seeds",
    "parse",
    "resolve_location_to_seed",
    "resolve_seed_to_location",
    "trace_seed",
]
