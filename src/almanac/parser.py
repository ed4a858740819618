"""Line-oriented parser for almanac text.

Grammar::

    almanac   := seeds_line blank+ section (blank+ section)*
    seeds_line:= 'seeds:' (WS U64)+
    section   := header NL blank* row (NL row)*
    header    := CATEGORY '-to-' CATEGORY ' map:'
    row       := U64 WS U64 WS U64        # dest_start source_start length
    CATEGORY  := 'seed' | 'soil' | 'fertilizer' | 'water' | 'light'
               | 'temperature' | 'humidity' | 'location'

With ``seed_mode="ranges"`` the seed values are read as ``start length``
pairs. Any deviation raises ``ParseError``; nothing partial is returned.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from almanac.range_map import CategoryRangeMap
from almanac.resolver import Almanac
from almanac.types import U64_MAX, Category, CategoryRange, Interval, SeedMode

_SEEDS_PREFIX = "seeds:"
_HEADER_RE = re.compile(r"^(?P<source>[a-z]+)-to-(?P<destination>[a-z]+) map:$")
_U64_RE = re.compile(r"^[0-9]+$")


class ParseError(ValueError):
    """Raised when almanac text does not match the expected grammar."""

    def __init__(self, message: str, *, line_number: int = 0, line: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.line = line

    def __str__(self) -> str:
        if self.line_number <= 0:
            return self.message
        return f"line {self.line_number}: {self.message}: {self.line!r}"


@dataclass(slots=True)
class _SectionAccumulator:
    """Rows collected for one map section before it is frozen."""

    source: Category
    destination: Category
    header_line_number: int
    header_line: str
    rows: list[CategoryRange] = field(default_factory=list)


def _parse_u64(token: str, line_number: int, line: str) -> int:
    if not _U64_RE.match(token):
        raise ParseError(f"non-numeric token {token!r}", line_number=line_number, line=line)
    value = int(token)
    if value > U64_MAX:
        raise ParseError(
            f"value {token} does not fit in 64 bits", line_number=line_number, line=line,
        )
    return value


def _parse_category(token: str, line_number: int, line: str) -> Category:
    try:
        return Category.from_token(token)
    except ValueError:
        raise ParseError(
            f"unknown category {token!r}", line_number=line_number, line=line,
        ) from None


def _parse_seeds(
    line: str, line_number: int, seed_mode: SeedMode,
) -> tuple[tuple[int, ...], tuple[Interval, ...]]:
    if not line.startswith(_SEEDS_PREFIX):
        raise ParseError("malformed seeds header", line_number=line_number, line=line)
    tokens = line[len(_SEEDS_PREFIX):].split()
    if not tokens:
        raise ParseError("seeds header lists no values", line_number=line_number, line=line)
    values = [_parse_u64(tok, line_number, line) for tok in tokens]
    if seed_mode == "values":
        return tuple(values), ()

    if len(values) % 2 != 0:
        raise ParseError(
            f"seed ranges need start/length pairs, got {len(values)} values",
            line_number=line_number,
            line=line,
        )
    ranges: list[Interval] = []
    for start, length in zip(values[0::2], values[1::2]):
        try:
            ranges.append(Interval.from_length(start, length))
        except ValueError as exc:
            raise ParseError(str(exc), line_number=line_number, line=line) from None
    return (), tuple(ranges)


def _parse_header(line: str, line_number: int) -> _SectionAccumulator:
    m = _HEADER_RE.match(line)
    if m is None:
        raise ParseError("malformed map header", line_number=line_number, line=line)
    source = _parse_category(m.group("source"), line_number, line)
    destination = _parse_category(m.group("destination"), line_number, line)
    if destination != source.successor():
        raise ParseError(
            f"{source} must map to its next category, not {destination}",
            line_number=line_number,
            line=line,
        )
    return _SectionAccumulator(
        source=source,
        destination=destination,
        header_line_number=line_number,
        header_line=line,
    )


def _parse_row(line: str, line_number: int) -> CategoryRange:
    fields = line.split()
    if len(fields) != 3:
        raise ParseError(
            f"expected 3 fields, got {len(fields)}", line_number=line_number, line=line,
        )
    dest_start, source_start, length = (_parse_u64(f, line_number, line) for f in fields)
    try:
        return CategoryRange.from_row(dest_start, source_start, length)
    except ValueError as exc:
        raise ParseError(str(exc), line_number=line_number, line=line) from None


def _is_header_like(line: str) -> bool:
    return "-to-" in line or line.endswith("map:")


def parse(text: str, *, seed_mode: SeedMode = "values") -> Almanac:
    """Parse almanac text into an immutable ``Almanac``.

    Raises:
        ParseError: on any grammar violation.
    """
    if seed_mode not in ("values", "ranges"):
        raise ValueError(f"seed_mode must be 'values' or 'ranges', got {seed_mode!r}")

    lines = [ln.rstrip() for ln in text.replace("\r\n", "\n").split("\n")]
    numbered = list(enumerate(lines, start=1))
    cursor = 0
    while cursor < len(numbered) and not numbered[cursor][1]:
        cursor += 1
    if cursor == len(numbered):
        raise ParseError("input is empty")

    seeds_line_number, seeds_line = numbered[cursor]
    seeds, seed_ranges = _parse_seeds(seeds_line, seeds_line_number, seed_mode)
    cursor += 1
    if cursor < len(numbered) and numbered[cursor][1]:
        line_number, line = numbered[cursor]
        raise ParseError(
            "expected a blank line after the seeds header", line_number=line_number, line=line,
        )

    sections: list[_SectionAccumulator] = []
    current: _SectionAccumulator | None = None
    after_blank = True
    for line_number, line in numbered[cursor:]:
        if not line:
            after_blank = True
            continue
        if _is_header_like(line):
            if not after_blank:
                raise ParseError(
                    "map header must follow a blank line", line_number=line_number, line=line,
                )
            if current is not None and not current.rows:
                raise ParseError(
                    f"map {current.source}-to-{current.destination} has no ranges",
                    line_number=current.header_line_number,
                    line=current.header_line,
                )
            current = _parse_header(line, line_number)
            sections.append(current)
            after_blank = False
            continue
        if current is None or (after_blank and current.rows):
            raise ParseError(
                "range row outside a map section", line_number=line_number, line=line,
            )
        current.rows.append(_parse_row(line, line_number))
        after_blank = False

    if not sections:
        raise ParseError("almanac defines no maps")
    if not sections[-1].rows:
        last = sections[-1]
        raise ParseError(
            f"map {last.source}-to-{last.destination} has no ranges",
            line_number=last.header_line_number,
            line=last.header_line,
        )

    slots: list[CategoryRangeMap | None] = [None] * len(Category)
    for section in sections:
        if slots[section.source] is not None:
            raise ParseError(
                f"duplicate map for source category {section.source}",
                line_number=section.header_line_number,
                line=section.header_line,
            )
        slots[section.source] = CategoryRangeMap(
            source=section.source,
            destination=section.destination,
            ranges=tuple(section.rows),
        )

    return Almanac(
        seed_mode=seed_mode,
        seeds=seeds,
        seed_ranges=seed_ranges,
        maps=tuple(slots),
    )
