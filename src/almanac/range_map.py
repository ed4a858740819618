"""Per-transition range tables with identity fallback.

A ``CategoryRangeMap`` holds the rows of one ``<source>-to-<destination>``
section. Lookups scan rows in table order and return the first hit, so the
result is deterministic even if the input carries overlapping spans.

The ``*_run`` variants also report how many consecutive values keep the same
offset. Callers use that to walk large spans one run at a time instead of one
value at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from almanac.types import U64_END, Category, CategoryRange, Interval


def _lookup_run(value: int, spans: tuple[tuple[Interval, int], ...]) -> tuple[int, int]:
    """Return ``(mapped, run_length)`` for the first span containing ``value``.

    The run stops at the end of the matching span, or earlier where a span
    listed before it begins, because that span would win the lookup there.
    """
    bound = U64_END
    for span, offset in spans:
        if value in span:
            return value + offset, min(bound, span.end) - value
        if span.start > value:
            bound = min(bound, span.start)
    return value, bound - value


@dataclass(frozen=True, slots=True)
class CategoryRangeMap:
    """Range table for one adjacent ``source -> destination`` transition."""

    source: Category
    destination: Category
    ranges: tuple[CategoryRange, ...]
    _forward: tuple[tuple[Interval, int], ...] = field(init=False, repr=False, compare=False)
    _reverse: tuple[tuple[Interval, int], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.destination != self.source.successor():
            raise ValueError(
                f"{self.source}-to-{self.destination} is not an adjacent transition",
            )
        object.__setattr__(
            self, "_forward", tuple((r.source, r.offset) for r in self.ranges),
        )
        object.__setattr__(
            self, "_reverse", tuple((r.destination, -r.offset) for r in self.ranges),
        )

    @property
    def name(self) -> str:
        return f"{self.source}-to-{self.destination}"

    def destination_for(self, value: int) -> int:
        for r in self.ranges:
            if value in r.source:
                return r.destination.start + (value - r.source.start)
        return value

    def source_for(self, value: int) -> int:
        for r in self.ranges:
            if value in r.destination:
                return r.source.start + (value - r.destination.start)
        return value

    def destination_run(self, value: int) -> tuple[int, int]:
        """Forward lookup plus the length of the constant-offset run at ``value``."""
        return _lookup_run(value, self._forward)

    def source_run(self, value: int) -> tuple[int, int]:
        """Reverse lookup plus the length of the constant-offset run at ``value``."""
        return _lookup_run(value, self._reverse)

    def max_source_end(self) -> int:
        return max((r.source.end for r in self.ranges), default=0)
