#!/usr/bin/env python3
"""Publish the issue lists of one mailing.

Reads an issues repository and writes every HTML document of the mailing
plus a run manifest:

    <path>/meta-data/section.data         section reference table
    <path>/meta-data/<prefix>old-toc.html  previous table of contents
    <path>/xml/config.xml                 mailing configuration
    <path>/xml/issue*.xml                 issue files
    <path>/mailing/                       output

Usage:
    python3 scripts/make_lists.py                   # current directory
    python3 scripts/make_lists.py ~/lwg --verbose
    python3 scripts/make_lists.py ~/lwg --skip-bad-issues

A JSON summary of the run goes to stdout; progress goes to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any

import orjson

from issuelist.errors import IssueListError
from issuelist.file_names import FileNames
from issuelist.issue_reader import load_section_index, load_snapshot, read_issues
from issuelist.issue_types import IssueRecord
from issuelist.mailing_info import load_mailing_info
from issuelist.markup import prepare_issues
from issuelist.report_generator import ReportGenerator
from issuelist.run_manifest import (
    build_manifest,
    compare_manifests,
    default_manifest_path,
    generate_run_id,
    git_commit_hash,
    load_manifest,
    write_manifest,
)
from issuelist.snapshot_diff import diff_snapshots, render_revision_report, snapshot_from_issues
from issuelist.status import is_not_resolved, is_ready, is_votable, publication_category

log = logging.getLogger("make_lists")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


# ---------------------------------------------------------------------------
# Document set
# ---------------------------------------------------------------------------


def write_documents(
    generator: ReportGenerator,
    issues: list[IssueRecord],
    target: Path,
    diff_report: str,
) -> list[Path]:
    """Write every document of the mailing; *issues* sorted by number."""
    names = generator.names
    written: list[Path] = [
        generator.make_active(issues, target, diff_report),
        generator.make_defect(issues, target, diff_report),
        generator.make_closed(issues, target, diff_report),
        generator.make_tentative(issues, target),
        generator.make_unresolved(issues, target),
        generator.make_immediate(issues, target),
        generator.make_sort_by_num(issues, target / names.toc),
        generator.make_sort_by_status(issues, target / names.status_index),
        generator.make_sort_by_status_mod_date(issues, target / names.status_date_index),
        generator.make_sort_by_section(issues, target / names.section_index),
        generator.make_sort_by_section(issues, target / names.open_index, active_only=True),
    ]

    unresolved = [i for i in issues if is_not_resolved(i.status)]
    votable = [i for i in issues if is_votable(i.status)]
    # Between meetings nothing is votable, so Ready issues are listed as
    # votable; during a meeting they stay with the unresolved issues.
    ready = [i for i in issues if is_ready(i.status)]
    if votable:
        unresolved += ready
    else:
        votable += ready

    written += [
        generator.make_sort_by_num(unresolved, target / names.unresolved_toc),
        generator.make_sort_by_status(unresolved, target / names.unresolved_status_index),
        generator.make_sort_by_status_mod_date(
            unresolved, target / names.unresolved_status_date_index
        ),
        generator.make_sort_by_section(unresolved, target / names.unresolved_section_index),
        generator.make_sort_by_priority(unresolved, target / names.unresolved_prioritized_index),
    ]

    written += [
        generator.make_sort_by_num(votable, target / names.votable_toc),
        generator.make_sort_by_status(votable, target / names.votable_status_index),
        generator.make_sort_by_status_mod_date(votable, target / names.votable_status_date_index),
        generator.make_sort_by_section(votable, target / names.votable_section_index),
    ]
    return written


def count_by_category(issues: list[IssueRecord]) -> dict[str, int]:
    counts = {"Active": 0, "Defect": 0, "Closed": 0}
    for iss in issues:
        counts[publication_category(iss.status)] += 1
    return counts


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


def run_publish(root: Path, *, skip_errors: bool = False) -> dict[str, Any]:
    """Full publishing run over the repository at *root*; returns the manifest."""
    t0 = time.time()
    timings: dict[str, float] = {}
    meta_dir = root / "meta-data"
    xml_dir = root / "xml"
    target = root / "mailing"

    section_index = load_section_index(meta_dir / "section.data")
    config = load_mailing_info(xml_dir / "config.xml")
    names = FileNames(config.get_file_name_prefix())
    old_snapshot = load_snapshot(meta_dir / names.old_toc)
    timings["load_inputs"] = round(time.time() - t0, 3)

    t_parse = time.time()
    issues, read_failures = read_issues(xml_dir, section_index, skip_errors=skip_errors)
    timings["parse_issues"] = round(time.time() - t_parse, 3)

    t_markup = time.time()
    markup_failures = prepare_issues(issues, section_index, names=names, skip_errors=skip_errors)
    timings["transform_markup"] = round(time.time() - t_markup, 3)

    diff = diff_snapshots(old_snapshot, snapshot_from_issues(issues))
    diff_report = render_revision_report(diff)

    t_write = time.time()
    generator = ReportGenerator(config, section_index, names)
    written = write_documents(generator, issues, target, diff_report)
    timings["write_documents"] = round(time.time() - t_write, 3)
    timings["total"] = round(time.time() - t0, 3)
    log.info("Wrote %d documents to %s", len(written), target)

    previous_path = default_manifest_path(target)
    previous = load_manifest(previous_path) if previous_path.exists() else None

    errors = [str(e) for e in (*read_failures, *markup_failures)]
    manifest = build_manifest(
        run_id=generate_run_id(),
        source_dir=root,
        target_dir=target,
        revision=config.get_revision(),
        issue_counts=count_by_category(issues),
        documents=[p.name for p in written],
        timings_sec=timings,
        errors_count=len(errors),
        unknown_section_tags=list(section_index.unknown_tags),
        git_commit=git_commit_hash(search_from=root),
        notes={"errors": errors, "diff": diff.to_dict()},
    )
    write_manifest(target, manifest)
    if previous is not None:
        manifest["compared_to_previous"] = compare_manifests(manifest, previous)
    return manifest


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Publish the HTML issue lists of one mailing."
    )
    parser.add_argument(
        "path", type=Path, nargs="?", default=Path.cwd(),
        help="Root of the issues repository (default: current directory)",
    )
    parser.add_argument(
        "--skip-bad-issues", action="store_true",
        help="Report issues that fail to parse or transform, and publish the rest",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    root: Path = args.path.resolve()
    try:
        manifest = run_publish(root, skip_errors=args.skip_bad_issues)
    except (IssueListError, OSError) as exc:
        log.error("%s", exc)
        sys.exit(1)

    dump_json({
        "run_id": manifest["run_id"],
        "revision": manifest["revision"],
        "issue_counts": manifest["issue_counts"],
        "documents": len(manifest["documents"]),
        "errors_count": manifest["errors_count"],
        "unknown_section_tags": manifest["unknown_section_tags"],
        "timings_sec": manifest["timings_sec"],
    })


if __name__ == "__main__":
    main()
