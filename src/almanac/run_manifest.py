"""Run-manifest utilities for solver reproducibility and comparison."""
from __future__ import annotations

import hashlib
import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from almanac.io_utils import load_json, save_json

MANIFEST_VERSION = "1.0"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


def generate_run_id(prefix: str = "almanac_solve") -> str:
    """Generate a compact run id suitable for artifact naming."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid4().hex[:8]}"


def git_commit_hash(*, search_from: Path | None = None) -> str | None:
    """Best-effort current git commit hash for reproducibility metadata."""
    cwd = (search_from or Path.cwd())
    if cwd.is_file():
        cwd = cwd.parent
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if proc.returncode != 0:
        return None
    out = proc.stdout.strip()
    return out if out else None


def input_fingerprint(text: str) -> dict[str, Any]:
    """Content hash and size of the almanac text a run consumed."""
    return {
        "sha256": hashlib.sha256(text.encode("utf-8")).hexdigest(),
        "line_count": len(text.splitlines()),
        "char_count": len(text),
    }


def build_manifest(
    *,
    run_id: str,
    input_source: dict[str, Any],
    part: int,
    strategy: str,
    answer: int,
    timings_sec: dict[str, float],
    search: dict[str, Any] | None = None,
    git_commit: str | None = None,
    notes: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build canonical manifest payload for one solver run."""
    return {
        "manifest_version": MANIFEST_VERSION,
        "created_at": utc_now_iso(),
        "run_id": run_id,
        "git_commit": git_commit,
        "input_source": input_source,
        "part": int(part),
        "strategy": strategy,
        "answer": int(answer),
        "timings_sec": timings_sec,
        "search": search or {},
        "notes": notes or {},
    }


def write_manifest(path: Path, manifest: dict[str, Any]) -> Path:
    """Write a manifest as pretty JSON; returns the path written."""
    save_json(manifest, path, pretty=True)
    return path


def load_manifest(path: Path) -> dict[str, Any]:
    """Load a manifest from JSON."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid manifest payload in {path}")
    return data


def compare_manifests(
    current: dict[str, Any],
    previous: dict[str, Any],
) -> dict[str, Any]:
    """Compare two manifest payloads and produce deterministic deltas."""
    curr_source = current.get("input_source", {})
    prev_source = previous.get("input_source", {})
    curr_source = curr_source if isinstance(curr_source, dict) else {}
    prev_source = prev_source if isinstance(prev_source, dict) else {}

    curr_timings = current.get("timings_sec", {})
    prev_timings = previous.get("timings_sec", {})
    curr_timings = curr_timings if isinstance(curr_timings, dict) else {}
    prev_timings = prev_timings if isinstance(prev_timings, dict) else {}
    keys = sorted(set(curr_timings.keys()) | set(prev_timings.keys()))
    timing_delta: dict[str, float] = {}
    for key in keys:
        curr_val = float(curr_timings.get(key, 0.0) or 0.0)
        prev_val = float(prev_timings.get(key, 0.0) or 0.0)
        timing_delta[key] = round(curr_val - prev_val, 6)

    return {
        "current_run_id": current.get("run_id"),
        "previous_run_id": previous.get("run_id"),
        "same_input": curr_source.get("sha256") == prev_source.get("sha256"),
        "same_part": current.get("part") == previous.get("part"),
        "answer_changed": current.get("answer") != previous.get("answer"),
        "answer_current": current.get("answer"),
        "answer_previous": previous.get("answer"),
        "timings_sec_delta": timing_delta,
    }
