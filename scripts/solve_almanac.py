#!/usr/bin/env python3
"""Solve an almanac: lowest location from explicit seeds or seed ranges.

Usage::

    python3 scripts/solve_almanac.py --input input.txt --part 1
    python3 scripts/solve_almanac.py --input input.txt --part 2 --workers 8
    python3 scripts/solve_almanac.py --sample --part 2 --strategy intervals --json
    python3 scripts/solve_almanac.py --sample --trace 79 --trace 14

    # Write a run manifest and compare it with an earlier one:
    python3 scripts/solve_almanac.py --input input.txt --part 2 \
        --report-out artifacts/run_manifest.json \
        --compare-to artifacts/previous_manifest.json

Prints the answer (or a JSON payload with ``--json``) to stdout; log
messages go to stderr. Exit code 1 on parse/search errors or missing input.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from almanac.intervals import lowest_location_by_intervals
from almanac.io_utils import dumps_json
from almanac.parser import ParseError, parse
from almanac.resolver import lowest_location_for_seeds, trace_seed
from almanac.run_manifest import (
    build_manifest,
    compare_manifests,
    generate_run_id,
    git_commit_hash,
    input_fingerprint,
    load_manifest,
    write_manifest,
)
from almanac.sample import SAMPLE_ALMANAC
from almanac.search import (
    DomainError,
    SearchConfig,
    find_lowest_reachable_location,
    location_upper_bound,
)

log = logging.getLogger("solve_almanac")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find the lowest location reachable through an almanac.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--input", type=Path, help="Path to almanac text")
    source.add_argument(
        "--sample", action="store_true", help="Use the embedded sample almanac",
    )
    parser.add_argument(
        "--part", type=int, choices=(1, 2), default=1,
        help="1 = explicit seeds, 2 = seed ranges (default: 1)",
    )
    parser.add_argument(
        "--strategy", choices=("scan", "intervals"), default="scan",
        help="Part 2 only: bounded reverse scan (default) or exact interval propagation",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Search worker count (default: ALMANAC_WORKERS or CPU count)",
    )
    parser.add_argument(
        "--chunk-size", type=int, default=None,
        help="Locations per search task (default: ALMANAC_CHUNK_SIZE or 1000000)",
    )
    parser.add_argument(
        "--backend", choices=("process", "thread"), default=None,
        help="Worker pool type (default: ALMANAC_BACKEND or process)",
    )
    parser.add_argument(
        "--trace", type=int, action="append", default=[], metavar="SEED",
        help="Print the per-category values for SEED (repeatable)",
    )
    parser.add_argument("--report-out", type=Path, default=None, help="Write a run manifest")
    parser.add_argument(
        "--compare-to", type=Path, default=None,
        help="Compare this run against an earlier run manifest",
    )
    parser.add_argument("--json", action="store_true", help="Emit a JSON payload on stdout")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def _search_config(args: argparse.Namespace) -> SearchConfig:
    base = SearchConfig.from_env()
    return SearchConfig(
        workers=args.workers if args.workers is not None else base.workers,
        chunk_size=args.chunk_size if args.chunk_size is not None else base.chunk_size,
        backend=args.backend if args.backend is not None else base.backend,
    )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.sample:
        text = SAMPLE_ALMANAC
        input_source: dict[str, Any] = {"mode": "sample"}
    else:
        if not args.input.exists():
            log.error("Input file not found: %s", args.input)
            return 1
        text = args.input.read_text(encoding="utf-8")
        input_source = {"mode": "file", "path": str(args.input)}
    input_source.update(input_fingerprint(text))

    try:
        config = _search_config(args)
    except ValueError as exc:
        log.error("Invalid search settings: %s", exc)
        return 1

    seed_mode = "values" if args.part == 1 else "ranges"
    t0 = time.monotonic()
    try:
        almanac = parse(text, seed_mode=seed_mode)
    except ParseError as exc:
        log.error("ParseError: %s", exc)
        return 1
    t_parse = time.monotonic() - t0
    log.debug("Parsed %d map(s) in %.3fs", len(almanac.present_maps()), t_parse)

    traces: dict[str, list[dict[str, Any]]] = {}
    for seed in args.trace:
        steps = trace_seed(almanac, seed)
        traces[str(seed)] = [{"category": str(c), "value": v} for c, v in steps]
        log.info("Trace %s", ", ".join(f"{c} {v}" for c, v in steps))

    strategy = "forward" if args.part == 1 else args.strategy
    t1 = time.monotonic()
    try:
        if args.part == 1:
            answer = lowest_location_for_seeds(almanac)
        elif args.strategy == "intervals":
            answer = lowest_location_by_intervals(almanac)
        else:
            answer = find_lowest_reachable_location(almanac, config=config)
    except DomainError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 1
    t_solve = time.monotonic() - t1

    search_info: dict[str, Any] = {}
    if strategy == "scan":
        search_info = {
            "upper_bound": location_upper_bound(almanac),
            "workers": config.workers,
            "chunk_size": config.chunk_size,
            "backend": config.backend,
        }

    run_id = generate_run_id()
    manifest = build_manifest(
        run_id=run_id,
        input_source=input_source,
        part=args.part,
        strategy=strategy,
        answer=answer,
        timings_sec={"parse": round(t_parse, 6), "solve": round(t_solve, 6)},
        search=search_info,
        git_commit=git_commit_hash(search_from=ROOT),
    )
    if args.report_out is not None:
        write_manifest(args.report_out, manifest)
        log.info("Run manifest written to %s", args.report_out)

    comparison: dict[str, Any] | None = None
    if args.compare_to is not None:
        if not args.compare_to.exists():
            log.error("Manifest to compare against not found: %s", args.compare_to)
            return 1
        comparison = compare_manifests(manifest, load_manifest(args.compare_to))
        if comparison["answer_changed"]:
            log.warning(
                "Answer changed: %s -> %s",
                comparison["answer_previous"], comparison["answer_current"],
            )

    if args.json:
        payload: dict[str, Any] = {
            "run_id": run_id,
            "part": args.part,
            "strategy": strategy,
            "answer": answer,
        }
        if traces:
            payload["traces"] = traces
        if comparison is not None:
            payload["comparison"] = comparison
        sys.stdout.buffer.write(dumps_json(payload))
    else:
        print(answer)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
