#!/usr/bin/env python3
"""List the number of every issue with a given status.

Usage:
    python3 scripts/list_issues.py Ready
    python3 scripts/list_issues.py "Tentatively Ready" --path ~/lwg
    python3 scripts/list_issues.py New --json

Numbers are printed one per line in ascending order, or as a JSON array
with --json.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from issuelist.errors import IssueListError
from issuelist.issue_reader import load_section_index, read_issues

log = logging.getLogger("list_issues")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def find_issues_with_status(root: Path, status: str) -> list[int]:
    """Numbers of the issues under *root* whose status is exactly *status*."""
    section_index = load_section_index(root / "meta-data" / "section.data")
    issues, _ = read_issues(root / "xml", section_index)
    return sorted(iss.number for iss in issues if iss.status == status)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print the number of every issue with the given status."
    )
    parser.add_argument("status", help="Exact status text, e.g. 'Tentatively Ready'")
    parser.add_argument(
        "--path", type=Path, default=Path.cwd(),
        help="Root of the issues repository (default: current directory)",
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON array")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    try:
        numbers = find_issues_with_status(args.path.resolve(), args.status)
    except (IssueListError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        dump_json(numbers)
    else:
        for number in numbers:
            print(number)


if __name__ == "__main__":
    main()
