"""Run-manifest utilities for publishing-run reproducibility and comparison."""
from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from issuelist.io_utils import load_json, save_json

MANIFEST_VERSION = "1.0"
MANIFEST_FILENAME = "run_manifest.json"


def utc_now_iso() -> str:
    """Return current UTC timestamp in ISO-8601 format."""
    return datetime.now(UTC).isoformat()


def generate_run_id(prefix: str = "mailing") -> str:
    """Generate a compact run id suitable for artifact naming."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
    return f"{prefix}_{ts}_{uuid4().hex[:8]}"


def default_manifest_path(target_dir: Path) -> Path:
    return target_dir / MANIFEST_FILENAME


def versioned_manifest_path(target_dir: Path, run_id: str) -> Path:
    return target_dir / f"run_manifest_{run_id}.json"


def git_commit_hash(*, search_from: Path | None = None) -> str | None:
    """Best-effort current git commit hash of the issues repository."""
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


def build_manifest(
    *,
    run_id: str,
    source_dir: Path,
    target_dir: Path,
    revision: str,
    issue_counts: dict[str, int],
    documents: list[str],
    timings_sec: dict[str, float],
    errors_count: int,
    unknown_section_tags: list[str] | None = None,
    git_commit: str | None = None,
    notes: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build canonical manifest payload for one publishing run."""
    return {
        "manifest_version": MANIFEST_VERSION,
        "created_at": utc_now_iso(),
        "run_id": run_id,
        "source_dir": str(source_dir),
        "target_dir": str(target_dir),
        "revision": revision,
        "git_commit": git_commit,
        "issue_counts": dict(issue_counts),
        "documents": sorted(documents),
        "unknown_section_tags": sorted(unknown_section_tags or []),
        "timings_sec": timings_sec,
        "errors_count": int(errors_count),
        "notes": notes or {},
    }


def write_manifest(
    target_dir: Path,
    manifest: dict[str, Any],
) -> tuple[Path, Path]:
    """Write canonical + versioned manifest files into the mailing directory."""
    canonical = default_manifest_path(target_dir)
    versioned = versioned_manifest_path(target_dir, str(manifest["run_id"]))
    save_json(manifest, canonical, pretty=True)
    save_json(manifest, versioned, pretty=True)
    return canonical, versioned


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
    curr_counts = current.get("issue_counts", {})
    prev_counts = previous.get("issue_counts", {})
    curr_counts = curr_counts if isinstance(curr_counts, dict) else {}
    prev_counts = prev_counts if isinstance(prev_counts, dict) else {}

    keys = sorted(set(curr_counts.keys()) | set(prev_counts.keys()))
    count_delta: dict[str, int] = {}
    for key in keys:
        curr_val = int(curr_counts.get(key, 0) or 0)
        prev_val = int(prev_counts.get(key, 0) or 0)
        count_delta[key] = curr_val - prev_val

    curr_errors = int(current.get("errors_count", 0) or 0)
    prev_errors = int(previous.get("errors_count", 0) or 0)

    return {
        "current_run_id": current.get("run_id"),
        "previous_run_id": previous.get("run_id"),
        "revision_changed": current.get("revision") != previous.get("revision"),
        "issue_count_delta": count_delta,
        "errors_count_delta": curr_errors - prev_errors,
    }
