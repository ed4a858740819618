"""Tests for the parallel lowest-location search driver."""
from __future__ import annotations

import pytest

from almanac.parser import parse
from almanac.resolver import Almanac, resolve_location_to_seed
from almanac.sample import SAMPLE_ALMANAC, SAMPLE_PART2_ANSWER
from almanac.search import (
    DEFAULT_CHUNK_SIZE,
    DomainError,
    LocationNotFoundError,
    SearchConfig,
    chunk_bounds,
    find_lowest_reachable_location,
    location_upper_bound,
    scan_chunk,
)
from almanac.types import Interval


@pytest.fixture(scope="module")
def almanac() -> Almanac:
    return parse(SAMPLE_ALMANAC, seed_mode="ranges")


def _brute_force(almanac: Almanac, start: int, end: int) -> int | None:
    for location in range(start, end):
        seed = resolve_location_to_seed(almanac, location)
        if any(seed in r for r in almanac.seed_ranges):
            return location
    return None


class TestUpperBound:
    def test_sample_bound(self, almanac: Almanac) -> None:
        assert location_upper_bound(almanac) == 97

    def test_no_location_map(self) -> None:
        sparse = parse("seeds: 1 2\n\nseed-to-soil map:\n0 5 5\n", seed_mode="ranges")
        assert location_upper_bound(sparse) == 0
        with pytest.raises(LocationNotFoundError):
            find_lowest_reachable_location(sparse, config=SearchConfig(workers=1))


class TestChunks:
    def test_chunks_cover_domain_in_order(self) -> None:
        assert chunk_bounds(10, 4) == [(0, 4), (4, 8), (8, 10)]

    def test_empty_domain(self) -> None:
        assert chunk_bounds(0, 4) == []


class TestScanChunk:
    def test_matches_brute_force_on_every_window(self, almanac: Almanac) -> None:
        ranges = almanac.seed_ranges
        for start in range(0, 97, 3):
            for end in (start + 1, start + 5, 97):
                expected = _brute_force(almanac, start, min(end, 97))
                assert scan_chunk(almanac, ranges, start, min(end, 97)) == expected

    def test_full_domain(self, almanac: Almanac) -> None:
        assert scan_chunk(almanac, almanac.seed_ranges, 0, 97) == SAMPLE_PART2_ANSWER


class TestFindLowest:
    def test_sample_answer(self, almanac: Almanac) -> None:
        config = SearchConfig(workers=1)
        assert find_lowest_reachable_location(almanac, config=config) == SAMPLE_PART2_ANSWER

    @pytest.mark.parametrize("workers", [1, 2, 4, 8])
    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 46, 47, 1000])
    def test_deterministic_across_pool_shapes(
        self, almanac: Almanac, workers: int, chunk_size: int,
    ) -> None:
        config = SearchConfig(workers=workers, chunk_size=chunk_size, backend="thread")
        for _ in range(3):
            assert find_lowest_reachable_location(almanac, config=config) == SAMPLE_PART2_ANSWER

    def test_process_backend(self, almanac: Almanac) -> None:
        config = SearchConfig(workers=2, chunk_size=10, backend="process")
        assert find_lowest_reachable_location(almanac, config=config) == SAMPLE_PART2_ANSWER

    def test_explicit_seed_ranges_override(self, almanac: Almanac) -> None:
        config = SearchConfig(workers=2, chunk_size=5, backend="thread")
        # Seed 13 reaches location 35, the smallest of the explicit seeds.
        result = find_lowest_reachable_location(almanac, [Interval(13, 14)], config=config)
        assert result == 35

    def test_not_found_below_bound(self, almanac: Almanac) -> None:
        config = SearchConfig(workers=2, chunk_size=10, backend="thread")
        with pytest.raises(LocationNotFoundError) as excinfo:
            find_lowest_reachable_location(almanac, [Interval(1000, 1010)], config=config)
        assert excinfo.value.upper_bound == 97
        assert isinstance(excinfo.value, DomainError)

    def test_empty_seed_ranges_not_found(self, almanac: Almanac) -> None:
        with pytest.raises(LocationNotFoundError):
            find_lowest_reachable_location(
                almanac, [Interval(5, 5)], config=SearchConfig(workers=1),
            )


class TestSearchConfig:
    def test_defaults(self) -> None:
        config = SearchConfig()
        assert config.workers >= 1
        assert config.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.backend == "process"

    @pytest.mark.parametrize(
        "kwargs",
        [{"workers": 0}, {"chunk_size": 0}, {"backend": "gpu"}],
    )
    def test_rejects_invalid(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValueError):
            SearchConfig(**kwargs)  # type: ignore[arg-type]

    def test_from_env(self) -> None:
        config = SearchConfig.from_env(
            {"ALMANAC_WORKERS": "3", "ALMANAC_CHUNK_SIZE": "250", "ALMANAC_BACKEND": "thread"},
        )
        assert config == SearchConfig(workers=3, chunk_size=250, backend="thread")

    def test_from_env_blank_values_use_defaults(self) -> None:
        config = SearchConfig.from_env({"ALMANAC_WORKERS": " ", "ALMANAC_CHUNK_SIZE": ""})
        assert config.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.backend == "process"
