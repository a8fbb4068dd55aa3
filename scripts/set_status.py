#!/usr/bin/env python3
"""Reset the status attribute of a single issue file.

Purely textual: only the status attribute of ``xml/issueNUMBER.xml`` is
rewritten. Underscores in the new status become spaces, which keeps shell
scripting simple.

Usage:
    python3 scripts/set_status.py 2345 Tentatively_Ready
    python3 scripts/set_status.py 2345 WP --path ~/lwg
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from issuelist.errors import IssueListError
from issuelist.io_utils import read_text, write_text
from issuelist.issue_parser import replace_status


def log(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def set_issue_status(root: Path, issue_number: int, new_status: str) -> Path:
    """Rewrite the status of issue *issue_number*; returns the file path."""
    if not root.is_dir():
        raise IssueListError(f"{root} is not an existing directory")
    path = root / "xml" / f"issue{issue_number}.xml"
    status = new_status.replace("_", " ")
    write_text(path, replace_status(read_text(path), issue_number, status, str(path)))
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Set the status of one issue (underscores become spaces)."
    )
    parser.add_argument("number", type=int, help="Issue number")
    parser.add_argument("new_status", help="New status, e.g. Tentatively_Ready")
    parser.add_argument(
        "--path", type=Path, default=Path.cwd(),
        help="Root of the issues repository (default: current directory)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        path = set_issue_status(args.path.resolve(), args.number, args.new_status)
    except (IssueListError, OSError) as exc:
        log(f"Error: {exc}")
        sys.exit(1)
    log(f"Updated {path}")


if __name__ == "__main__":
    main()
