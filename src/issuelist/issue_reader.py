"""Load the inputs of a publishing run from disk.

Layout of an issues repository:

    xml/issue*.xml              one issue per file
    xml/config.xml              mailing configuration
    meta-data/section.data      section reference table
    meta-data/<prefix>old-toc.html   previous mailing's table of contents
"""
from __future__ import annotations

import logging
from pathlib import Path

from issuelist.errors import IssueListError, IssueParseError, UnknownStatusError
from issuelist.io_utils import file_modified_date, read_text
from issuelist.issue_parser import parse_issue
from issuelist.issue_types import IssueRecord
from issuelist.sections import SectionIndex, read_section_index
from issuelist.snapshot_diff import SnapshotEntry, read_snapshot

log = logging.getLogger(__name__)


def issue_files(directory: Path) -> list[Path]:
    """Every ``issue*.xml`` file in *directory*, sorted by name."""
    if not directory.is_dir():
        raise IssueListError(f"{directory} is not an existing directory")
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.name.startswith("issue") and p.suffix == ".xml"
    )


def read_issue_file(path: Path, section_index: SectionIndex) -> IssueRecord:
    return parse_issue(
        read_text(path),
        str(path),
        section_index,
        last_modified=file_modified_date(path),
    )


def read_issues(
    directory: Path,
    section_index: SectionIndex,
    *,
    skip_errors: bool = False,
) -> tuple[list[IssueRecord], list[IssueListError]]:
    """Parse every issue file in *directory* (unordered by number).

    With *skip_errors*, files that fail to parse are logged and returned as
    failures; otherwise the first failure is raised.
    """
    issues: list[IssueRecord] = []
    failures: list[IssueListError] = []
    for path in issue_files(directory):
        try:
            issues.append(read_issue_file(path, section_index))
        except (IssueParseError, UnknownStatusError) as exc:
            if not skip_errors:
                raise
            log.warning("skipping %s: %s", path.name, exc)
            failures.append(exc)
    log.info("Read %d issues from %s", len(issues), directory)
    return issues, failures


def load_section_index(path: Path) -> SectionIndex:
    log.info("Reading section-tag index from %s", path)
    return read_section_index(read_text(path))


def load_snapshot(path: Path) -> list[SnapshotEntry]:
    log.info("Reading previous snapshot from %s", path)
    return read_snapshot(read_text(path))
