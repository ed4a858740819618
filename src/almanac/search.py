"""Parallel minimum-location search over seed ranges.

The candidate domain ``[0, U)`` is cut into ascending contiguous chunks.
Each chunk task reports its own smallest match (or ``None``) and the driver,
as the only writer of the running minimum, reduces those results. The answer
is therefore ``min{L : predicate(L)}`` no matter which worker finishes first.
Pending chunks that start above a known match are cancelled; that only
saves time, the reduction alone is what keeps the answer exact.

``U`` is the largest source end of the map that feeds ``location``. Values
at or above it map to themselves in the last stage and are not searched.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable, Mapping
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from dataclasses import dataclass, field
from typing import Literal

from almanac.resolver import Almanac, resolve_location_run
from almanac.types import Category, Interval

log = logging.getLogger(__name__)

type Backend = Literal["process", "thread"]

DEFAULT_CHUNK_SIZE = 1_000_000
_BACKENDS: frozenset[str] = frozenset({"process", "thread"})


class DomainError(RuntimeError):
    """Raised when a well-formed almanac breaks a search assumption."""


class LocationNotFoundError(DomainError):
    """No location below the search bound resolves into a seed range."""

    def __init__(self, upper_bound: int) -> None:
        super().__init__(
            f"no location in [0, {upper_bound}) resolves to a seed inside the seed ranges",
        )
        self.upper_bound = upper_bound


def _default_workers() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Worker pool settings for ``find_lowest_reachable_location``."""

    workers: int = field(default_factory=_default_workers)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    backend: Backend = "process"

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.backend not in _BACKENDS:
            raise ValueError(f"backend must be one of {sorted(_BACKENDS)}, got {self.backend!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SearchConfig:
        """Build a config from ``ALMANAC_WORKERS``/``ALMANAC_CHUNK_SIZE``/``ALMANAC_BACKEND``."""
        env = os.environ if environ is None else environ
        workers = env.get("ALMANAC_WORKERS", "").strip()
        chunk_size = env.get("ALMANAC_CHUNK_SIZE", "").strip()
        backend = env.get("ALMANAC_BACKEND", "").strip()
        return cls(
            workers=int(workers) if workers else _default_workers(),
            chunk_size=int(chunk_size) if chunk_size else DEFAULT_CHUNK_SIZE,
            backend=backend or "process",  # type: ignore[arg-type]
        )


def location_upper_bound(almanac: Almanac) -> int:
    """Largest source end among maps whose destination is ``location``."""
    return max(
        (
            table.max_source_end()
            for table in almanac.present_maps()
            if table.destination is Category.LOCATION
        ),
        default=0,
    )


def _first_offset_in_run(seed: int, span: int, seed_ranges: tuple[Interval, ...]) -> int | None:
    """Smallest ``k < span`` with ``seed + k`` inside any seed range."""
    best: int | None = None
    run_end = seed + span
    for seed_range in seed_ranges:
        lo = max(seed, seed_range.start)
        if lo < min(run_end, seed_range.end):
            k = lo - seed
            if best is None or k < best:
                best = k
    return best


def scan_chunk(
    almanac: Almanac,
    seed_ranges: tuple[Interval, ...],
    start: int,
    end: int,
) -> int | None:
    """Return the smallest location in ``[start, end)`` that reaches a seed range.

    Walks the chunk one constant-offset run at a time. Within a run the
    reverse mapping is ``seed + k``, so membership of the whole run is a
    single interval intersection per seed range.
    """
    location = start
    while location < end:
        seed, run_length = resolve_location_run(almanac, location)
        span = min(run_length, end - location)
        k = _first_offset_in_run(seed, span, seed_ranges)
        if k is not None:
            return location + k
        location += span
    return None


def chunk_bounds(upper_bound: int, chunk_size: int) -> list[tuple[int, int]]:
    """Ascending, contiguous ``[start, end)`` chunks covering ``[0, upper_bound)``."""
    return [
        (lo, min(lo + chunk_size, upper_bound))
        for lo in range(0, upper_bound, chunk_size)
    ]


def _make_executor(config: SearchConfig) -> Executor:
    if config.backend == "thread":
        return ThreadPoolExecutor(max_workers=config.workers)
    return ProcessPoolExecutor(max_workers=config.workers)


def _serial_min(
    almanac: Almanac,
    seed_ranges: tuple[Interval, ...],
    chunks: Iterable[tuple[int, int]],
) -> int | None:
    # Chunks are ascending, so the first chunk with a match holds the minimum.
    for lo, hi in chunks:
        match = scan_chunk(almanac, seed_ranges, lo, hi)
        if match is not None:
            return match
    return None


def _parallel_min(
    almanac: Almanac,
    seed_ranges: tuple[Interval, ...],
    chunks: list[tuple[int, int]],
    config: SearchConfig,
) -> int | None:
    best: int | None = None
    cancelled = 0
    with _make_executor(config) as pool:
        futures: dict[Future[int | None], int] = {
            pool.submit(scan_chunk, almanac, seed_ranges, lo, hi): lo
            for lo, hi in chunks
        }
        for future in as_completed(futures):
            if future.cancelled():
                continue
            match = future.result()
            if match is None:
                continue
            if best is None or match < best:
                best = match
                for pending, lo in futures.items():
                    if lo > best and pending.cancel():
                        cancelled += 1
    log.debug("Chunks cancelled after a smaller match was known: %d", cancelled)
    return best


def find_lowest_reachable_location(
    almanac: Almanac,
    seed_ranges: Iterable[Interval] | None = None,
    *,
    config: SearchConfig | None = None,
) -> int:
    """Smallest location whose reverse-resolved seed lies in a seed range.

    Args:
        almanac: Parsed almanac; only read.
        seed_ranges: Ranges to test; defaults to ``almanac.seed_ranges``.
        config: Worker pool settings; defaults to ``SearchConfig()``.

    Raises:
        LocationNotFoundError: if nothing in ``[0, U)`` matches.
    """
    ranges = almanac.seed_ranges if seed_ranges is None else tuple(seed_ranges)
    cfg = config if config is not None else SearchConfig()
    upper_bound = location_upper_bound(almanac)
    chunks = chunk_bounds(upper_bound, cfg.chunk_size)
    log.debug(
        "Searching [0, %d) in %d chunk(s) with %d %s worker(s)",
        upper_bound, len(chunks), cfg.workers, cfg.backend,
    )

    t0 = time.monotonic()
    live_ranges = tuple(r for r in ranges if not r.is_empty())
    if not live_ranges or not chunks:
        best = None
    elif cfg.workers <= 1 or len(chunks) == 1:
        best = _serial_min(almanac, live_ranges, chunks)
    else:
        best = _parallel_min(almanac, live_ranges, chunks, cfg)
    elapsed = time.monotonic() - t0

    if best is None:
        raise LocationNotFoundError(upper_bound)
    log.info("Lowest reachable location %d found in %.3fs", best, elapsed)
    return best
