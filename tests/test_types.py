"""Tests for almanac.types value contracts."""
from __future__ import annotations

import pytest

from almanac.types import U64_END, U64_MAX, Category, CategoryRange, Interval


class TestCategory:
    def test_total_order_runs_seed_to_location(self) -> None:
        names = [str(c) for c in sorted(Category)]
        assert names == [
            "seed", "soil", "fertilizer", "water",
            "light", "temperature", "humidity", "location",
        ]

    def test_from_token(self) -> None:
        assert Category.from_token("fertilizer") is Category.FERTILIZER

    def test_from_token_rejects_unknown_and_uppercase(self) -> None:
        with pytest.raises(ValueError):
            Category.from_token("dirt")
        with pytest.raises(ValueError):
            Category.from_token("Soil")

    def test_successor(self) -> None:
        assert Category.SEED.successor() is Category.SOIL
        assert Category.HUMIDITY.successor() is Category.LOCATION
        assert Category.LOCATION.successor() is None

    def test_format_uses_token(self) -> None:
        assert f"{Category.WATER}-to-{Category.LIGHT}" == "water-to-light"


class TestInterval:
    def test_half_open_membership(self) -> None:
        iv = Interval(79, 93)
        assert len(iv) == 14
        assert 79 in iv
        assert 92 in iv
        assert 93 not in iv
        assert 78 not in iv

    def test_from_length(self) -> None:
        assert Interval.from_length(55, 13) == Interval(55, 68)

    def test_empty_interval_allowed(self) -> None:
        iv = Interval(5, 5)
        assert iv.is_empty()
        assert 5 not in iv

    def test_overlaps(self) -> None:
        assert Interval(0, 10).overlaps(Interval(9, 20))
        assert not Interval(0, 10).overlaps(Interval(10, 20))

    def test_u64_ceiling(self) -> None:
        iv = Interval(U64_MAX, U64_END)
        assert U64_MAX in iv
        with pytest.raises(ValueError):
            Interval(0, U64_END + 1)

    def test_rejects_inverted_and_negative(self) -> None:
        with pytest.raises(ValueError):
            Interval(10, 5)
        with pytest.raises(ValueError):
            Interval(-1, 5)


class TestCategoryRange:
    def test_from_row_orders_destination_first(self) -> None:
        row = CategoryRange.from_row(50, 98, 2)
        assert row.source == Interval(98, 100)
        assert row.destination == Interval(50, 52)
        assert row.offset == -48

    def test_rejects_unequal_lengths(self) -> None:
        with pytest.raises(ValueError, match="lengths differ"):
            CategoryRange(source=Interval(0, 10), destination=Interval(0, 11))
