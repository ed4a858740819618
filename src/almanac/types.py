"""Core types for almanac parsing and range resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal


type SeedMode = Literal["values", "ranges"]

U64_MAX = 2**64 - 1
# Half-open interval ends may sit one past the largest u64 value.
U64_END = 2**64


class Category(IntEnum):
    """Conversion stage, ordered from seed to location."""

    SEED = 0
    SOIL = 1
    FERTILIZER = 2
    WATER = 3
    LIGHT = 4
    TEMPERATURE = 5
    HUMIDITY = 6
    LOCATION = 7

    @classmethod
    def from_token(cls, token: str) -> Category:
        """Parse a lowercase category token such as ``"soil"``."""
        if token != token.lower():
            raise ValueError(f"unknown category {token!r}")
        try:
            return cls[token.upper()]
        except KeyError:
            raise ValueError(f"unknown category {token!r}") from None

    def successor(self) -> Category | None:
        if self is Category.LOCATION:
            return None
        return Category(self + 1)

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


@dataclass(frozen=True, slots=True)
class Interval:
    """Half-open ``[start, end)`` span of u64 values."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.end} < {self.start}")
        if self.end > U64_END:
            raise ValueError(f"end must be <= 2**64, got {self.end}")

    @classmethod
    def from_length(cls, start: int, length: int) -> Interval:
        return cls(start, start + length)

    def __len__(self) -> int:
        return self.end - self.start

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.start <= value < self.end

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and other.start < self.end

    def is_empty(self) -> bool:
        return self.end == self.start


# Seed ranges share the interval contract; the alias keeps call sites readable.
type SeedRange = Interval


@dataclass(frozen=True, slots=True)
class CategoryRange:
    """One source span and the equally long destination span it maps onto."""

    source: Interval
    destination: Interval

    def __post_init__(self) -> None:
        if len(self.source) != len(self.destination):
            raise ValueError(
                "source and destination lengths differ: "
                f"{len(self.source)} != {len(self.destination)}",
            )

    @classmethod
    def from_row(cls, dest_start: int, source_start: int, length: int) -> CategoryRange:
        """Build from a ``dest_start source_start length`` map row."""
        return cls(
            source=Interval.from_length(source_start, length),
            destination=Interval.from_length(dest_start, length),
        )

    @property
    def offset(self) -> int:
        """Signed shift applied when mapping source to destination."""
        return self.destination.start - self.source.start
