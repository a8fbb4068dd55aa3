"""HTML document assembly for one mailing.

Three standard documents publish every issue once, by category:

    active.html    Active issues, with revision history and status legend
    defects.html   Defect reports
    closed.html    Closed issues

Meeting documents (tentative, unresolved, immediate) reuse the same
per-issue blocks; index documents (table of contents, by status, by date,
by section, by priority) list the issues in tables that link back into the
three standard documents.

The standard and meeting documents expect the issues sorted by number with
their markup already transformed. Index documents sort a copy themselves
with chains of stable sorts, least significant key first.
"""
from __future__ import annotations

import itertools
import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, date, datetime
from pathlib import Path
from typing import TypeAlias

from issuelist.file_names import FileNames
from issuelist.io_utils import write_text
from issuelist.issue_types import (
    IssueRecord,
    by_major_section,
    by_number,
    by_priority,
    by_section,
    by_status,
    is_sorted_by_number,
    make_ref_string,
)
from issuelist.mailing_info import MailingInfo
from issuelist.sections import SectionIndex, major_section, remove_square_brackets
from issuelist.status import (
    is_active,
    is_active_not_ready,
    is_closed,
    is_defect,
    is_not_resolved,
    is_tentative,
    remove_qualifier,
)

log = logging.getLogger(__name__)

IssuePredicate: TypeAlias = Callable[[IssueRecord], bool]

PROJECT_NAME = "Programming Language C++"

_PAPER_TITLES: dict[str, str] = {
    "active": "Active Issues List",
    "defect": "Defect Report List",
    "closed": "Closed Issues List",
}

_STYLE = """\
<style type="text/css">
  p {text-align:justify}
  li {text-align:justify}
  blockquote.note
  {
    background-color:#E0E0E0;
    padding-left: 15px;
    padding-right: 15px;
    padding-top: 1px;
    padding-bottom: 1px;
  }
  ins {background-color:#A0FFA0}
  del {background-color:#FFA0A0}
</style>
"""


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_date(value: date) -> str:
    """``YYYY-MM-DD``."""
    return value.isoformat()


def file_header(title: str) -> str:
    return (
        '<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01//EN"\n'
        '    "http://www.w3.org/TR/html4/strict.dtd">\n'
        "<html>\n"
        "<head>\n"
        f"<title>{title}</title>\n"
        f"{_STYLE}"
        "</head>\n"
        "<body>\n"
    )


def file_trailer() -> str:
    return "</body>\n</html>\n"


def _stable_sorted(
    issues: Iterable[IssueRecord],
    *keys: tuple[Callable[[IssueRecord], object], bool],
) -> list[IssueRecord]:
    """Sort by number, then apply each ``(key, reverse)`` as a stable sort.

    Keys are given least significant first.
    """
    ordered = sorted(issues, key=by_number)
    for key, reverse in keys:
        ordered.sort(key=key, reverse=reverse)
    return ordered


def _by_modified(issue: IssueRecord) -> date:
    return issue.last_modified_date


def _runs(
    issues: Sequence[IssueRecord],
    key: Callable[[IssueRecord], object],
) -> list[list[IssueRecord]]:
    """Split *issues* into maximal runs of equal *key*."""
    return [list(group) for _, group in itertools.groupby(issues, key=key)]


# ---------------------------------------------------------------------------
# Report generator
# ---------------------------------------------------------------------------


class ReportGenerator:
    """Writes the HTML documents of a mailing into a target directory.

    Args:
        config: Mailing configuration (revision, doc numbers, intros).
        section_index: Tag -> locator index; unknown tags are registered
            with the placeholder locator as they are met.
        names: Output file names.
        timestamp: Revision time printed in every document; defaults to now.
    """

    def __init__(
        self,
        config: MailingInfo,
        section_index: SectionIndex,
        names: FileNames | None = None,
        *,
        timestamp: datetime | None = None,
    ) -> None:
        self.config = config
        self.section_index = section_index
        self.names = names or FileNames()
        self.timestamp = timestamp or datetime.now(UTC)

    # -- shared fragments ---------------------------------------------------

    @property
    def build_timestamp(self) -> str:
        return f"<p>Revised {self.timestamp:%Y-%m-%d at %H:%M:%S} UTC</p>\n"

    def _write(self, path: Path, text: str) -> Path:
        write_text(path, text)
        log.info("Wrote %s", path)
        return path

    def _status_link(self, status: str) -> str:
        return f'<a href="{self.names.active}#{remove_qualifier(status)}">{status}</a>'

    def _section_text(self, tag: str) -> str:
        return self.section_index.format_tag(tag)

    def _list_heading(self) -> str:
        return (
            f"<h1>{self.config.get_doc_name()} Issues List "
            f"(Revision {self.config.get_revision()})</h1>\n"
        )

    def _index_intro(self, what: str) -> str:
        n = self.names
        return (
            f"<p>Reference {self.config.get_doc_reference()}</p>\n"
            f'<p>This document is the {what} for the <a href="{n.active}">Active Issues List</a>,\n'
            f'<a href="{n.defects}">Defect Reports List</a>, and '
            f'<a href="{n.closed}">Closed Issues List</a>.</p>\n'
        )

    def _paper_heading(self, paper: str) -> str:
        cfg = self.config
        return (
            "<table>\n"
            "<tr>\n"
            '  <td align="left">Doc. no.</td>\n'
            f'  <td align="left">{cfg.get_doc_number(paper)}</td>\n'
            "</tr>\n"
            "<tr>\n"
            '  <td align="left">Date:</td>\n'
            f'  <td align="left">{self.timestamp:%Y-%m-%d}</td>\n'
            "</tr>\n"
            "<tr>\n"
            '  <td align="left">Project:</td>\n'
            f'  <td align="left">{PROJECT_NAME}</td>\n'
            "</tr>\n"
            "<tr>\n"
            '  <td align="left">Reply to:</td>\n'
            f'  <td align="left">{cfg.get_maintainer()}</td>\n'
            "</tr>\n"
            "</table>\n"
            f"<h1>{cfg.get_doc_name()} {_PAPER_TITLES[paper]} "
            f"(Revision {cfg.get_revision()})</h1>\n"
            f"{self.build_timestamp}"
        )

    # -- index table ----------------------------------------------------------

    def index_table(self, issues: Sequence[IssueRecord]) -> str:
        """One table row per issue: number, status, section, title, resolution,
        duplicates, last modified."""
        n = self.names
        parts: list[str] = [
            '<table border="1" cellpadding="4">\n'
            "<tr>\n"
            f'  <td align="center"><a href="{n.toc}"><b>Issue</b></a></td>\n'
            f'  <td align="center"><a href="{n.status_index}"><b>Status</b></a></td>\n'
            f'  <td align="center"><a href="{n.section_index}"><b>Section</b></a></td>\n'
            '  <td align="center"><b>Title</b></td>\n'
            '  <td align="center"><b>Proposed Resolution</b></td>\n'
            '  <td align="center"><b>Duplicates</b></td>\n'
            f'  <td align="center"><a href="{n.status_date_index}"><b>Last modified</b></a></td>\n'
            "</tr>\n"
        ]

        prev_tag = ""
        for iss in issues:
            tag = iss.primary_tag
            section = self._section_text(tag)
            if tag != prev_tag:
                prev_tag = tag
                section += f'<a name="{remove_square_brackets(tag)}"></a>'
            resolution = "Yes" if iss.has_resolution else '<font color="red">No</font>'
            parts.append(
                "<tr>\n"
                f'<td align="right">{make_ref_string(iss)}</td>\n'
                f'<td align="left">{self._status_link(iss.status)}<a name="{iss.number}"></a></td>\n'
                f'<td align="left">{section}</td>\n'
                f'<td align="left">{iss.title}</td>\n'
                f'<td align="center">{resolution}</td>\n'
                f'<td align="left">{", ".join(sorted(iss.duplicates))}</td>\n'
                f'<td align="center">{format_date(iss.last_modified_date)}</td>\n'
                "</tr>\n"
            )
        parts.append("</table>\n")
        return "".join(parts)

    # -- per-issue blocks ---------------------------------------------------

    def issue_blocks(
        self,
        issues: Sequence[IssueRecord],
        predicate: IssuePredicate,
    ) -> str:
        """Full text of every issue in *issues* matching *predicate*.

        Cross-links to the section and status indexes are emitted only when
        another issue (of the whole collection) shares the section or status.
        """
        n = self.names
        tag_counts = Counter(iss.primary_tag for iss in issues)
        active_tag_counts = Counter(iss.primary_tag for iss in issues if is_active(iss.status))
        status_counts = Counter(iss.status for iss in issues)

        parts: list[str] = []
        for iss in issues:
            if not predicate(iss):
                continue
            tag = iss.primary_tag
            anchor = remove_square_brackets(tag)
            sections = ", ".join(self._section_text(t) for t in iss.section_tags)

            parts.append("<hr>\n")
            parts.append(f'<h3><a name="{iss.number}"></a>{iss.number}. {iss.title}</h3>\n')
            parts.append(
                f"<p><b>Section:</b> {sections}"
                f" <b>Status:</b> {self._status_link(iss.status)}\n"
                f" <b>Submitter:</b> {iss.submitter}"
                f" <b>Opened:</b> {format_date(iss.filed_date)}"
                f" <b>Last modified:</b> {format_date(iss.last_modified_date)}</p>\n"
            )
            if iss.is_prioritized:
                parts.append(f"<p><b>Priority: </b>{iss.priority}</p>\n")
            else:
                parts.append("<p><b>Priority: </b>Not Prioritized</p>\n")
            if iss.owner:
                parts.append(f"<p><b>Owner:</b> {iss.owner}</p>\n")

            if is_active(iss.status) and active_tag_counts[tag] > 1:
                parts.append(
                    f'<p><b>View other</b> <a href="{n.open_index}#{anchor}">active issues</a>'
                    f" in {tag}.</p>\n"
                )
            if tag_counts[tag] > 1:
                parts.append(
                    f'<p><b>View all other</b> <a href="{n.section_index}#{anchor}">issues</a>'
                    f" in {tag}.</p>\n"
                )
            if status_counts[iss.status] > 1:
                parts.append(
                    f'<p><b>View all issues with</b> <a href="{n.status_index}#{iss.status}">'
                    f"{iss.status}</a> status.</p>\n"
                )
            if iss.duplicates:
                parts.append(f"<p><b>Duplicate of:</b> {', '.join(sorted(iss.duplicates))}</p>\n")

            parts.append(f"{iss.body_text}\n\n")
        return "".join(parts)

    # -- standard documents -------------------------------------------------

    def _standard_document(
        self,
        paper: str,
        issues: Sequence[IssueRecord],
        path: Path,
        diff_report: str,
        heading: str,
        predicate: IssuePredicate,
        *,
        with_statuses: bool = False,
    ) -> Path:
        if not is_sorted_by_number(issues):
            raise ValueError("issues must be sorted by number")
        cfg = self.config
        parts = [
            file_header(f"{cfg.get_doc_name()} {_PAPER_TITLES[paper]}"),
            self._paper_heading(paper),
            f"{cfg.get_intro(paper)}\n",
            "<h2>Revision History</h2>\n",
            f"{cfg.get_revisions(issues, diff_report, self.names)}\n",
        ]
        if with_statuses:
            parts.append(f'<h2><a name="Status"></a>Issue Status</h2>\n{cfg.get_statuses()}\n')
        parts.append(f"<h2>{heading}</h2>\n")
        parts.append(self.issue_blocks(issues, predicate))
        parts.append(file_trailer())
        return self._write(path, "".join(parts))

    def make_active(self, issues: Sequence[IssueRecord], target_dir: Path, diff_report: str) -> Path:
        return self._standard_document(
            "active", issues, target_dir / self.names.active, diff_report,
            "Active Issues", lambda i: is_active(i.status), with_statuses=True,
        )

    def make_defect(self, issues: Sequence[IssueRecord], target_dir: Path, diff_report: str) -> Path:
        return self._standard_document(
            "defect", issues, target_dir / self.names.defects, diff_report,
            "Defect Reports", lambda i: is_defect(i.status),
        )

    def make_closed(self, issues: Sequence[IssueRecord], target_dir: Path, diff_report: str) -> Path:
        return self._standard_document(
            "closed", issues, target_dir / self.names.closed, diff_report,
            "Closed Issues", lambda i: is_closed(i.status),
        )

    # -- meeting documents --------------------------------------------------

    def _meeting_document(
        self,
        issues: Sequence[IssueRecord],
        path: Path,
        title: str,
        heading: str,
        predicate: IssuePredicate,
    ) -> Path:
        if not is_sorted_by_number(issues):
            raise ValueError("issues must be sorted by number")
        text = (
            file_header(f"{self.config.get_doc_name()} {title}")
            + self.build_timestamp
            + f"<h2>{heading}</h2>\n"
            + self.issue_blocks(issues, predicate)
            + file_trailer()
        )
        return self._write(path, text)

    def make_tentative(self, issues: Sequence[IssueRecord], target_dir: Path) -> Path:
        """Tentative issues that may be acted on during a meeting."""
        return self._meeting_document(
            issues, target_dir / self.names.tentative,
            "Tentative Issues", "Tentative Issues", lambda i: is_tentative(i.status),
        )

    def make_unresolved(self, issues: Sequence[IssueRecord], target_dir: Path) -> Path:
        """Issues still to be reviewed during a meeting."""
        return self._meeting_document(
            issues, target_dir / self.names.unresolved,
            "Unresolved Issues", "Unresolved Issues", lambda i: is_not_resolved(i.status),
        )

    def make_immediate(self, issues: Sequence[IssueRecord], target_dir: Path) -> Path:
        return self._meeting_document(
            issues, target_dir / self.names.immediate,
            "Issues Resolved Directly In Meeting", "Immediate Issues",
            lambda i: i.status == "Immediate",
        )

    # -- index documents ----------------------------------------------------

    def _status_grouped_tables(self, ordered: Sequence[IssueRecord]) -> str:
        parts: list[str] = []
        for group in _runs(ordered, key=lambda i: i.status):
            status = group[0].status
            parts.append(f'<h2><a name="{status}"></a>{status} ({len(group)} issues)</h2>\n')
            parts.append(self.index_table(group))
        return "".join(parts)

    def make_sort_by_num(self, issues: Iterable[IssueRecord], path: Path) -> Path:
        """Table of contents: every issue by number."""
        ordered = sorted(issues, key=by_number)
        text = (
            file_header("Table of Contents")
            + self._list_heading()
            + "<h1>Table of Contents</h1>\n"
            + self._index_intro("Table of Contents")
            + self.build_timestamp
            + self.index_table(ordered)
            + file_trailer()
        )
        return self._write(path, text)

    def make_sort_by_status(self, issues: Iterable[IssueRecord], path: Path) -> Path:
        """Grouped by status; within a status by section, most recent first."""
        ordered = _stable_sorted(
            issues,
            (_by_modified, True),
            (by_section(self.section_index), False),
            (by_status, False),
        )
        text = (
            file_header("Index by Status and Section")
            + self._list_heading()
            + "<h1>Index by Status and Section</h1>\n"
            + self._index_intro("Index by Status and Section")
            + self.build_timestamp
            + self._status_grouped_tables(ordered)
            + file_trailer()
        )
        return self._write(path, text)

    def make_sort_by_status_mod_date(self, issues: Iterable[IssueRecord], path: Path) -> Path:
        """Grouped by status; within a status most recently modified first."""
        ordered = _stable_sorted(
            issues,
            (by_section(self.section_index), False),
            (_by_modified, True),
            (by_status, False),
        )
        text = (
            file_header("Index by Status and Date")
            + self._list_heading()
            + "<h1>Index by Status and Date</h1>\n"
            + self._index_intro("Index by Status and Date")
            + self.build_timestamp
            + self._status_grouped_tables(ordered)
            + file_trailer()
        )
        return self._write(path, text)

    def make_sort_by_section(
        self,
        issues: Iterable[IssueRecord],
        path: Path,
        *,
        active_only: bool = False,
    ) -> Path:
        """Grouped by major section.

        With *active_only*, only the active issues ranked after ``Ready`` are
        listed (the issues still needing work).
        """
        n = self.names
        ordered = _stable_sorted(issues, (_by_modified, True), (by_status, False))
        if active_only:
            ordered = _active_after_ready(ordered)
        ordered.sort(key=by_section(self.section_index))

        major = by_major_section(self.section_index)
        open_majors = {major(i) for i in ordered if is_active_not_ready(i.status)}

        parts: list[str] = [
            file_header("Index by Section"),
            self._list_heading(),
            "<h1>Index by Section</h1>\n",
            f"<p>Reference {self.config.get_doc_reference()}</p>\n",
            f'<p>This document is the Index by Section for the <a href="{n.active}">Active Issues List</a>',
        ]
        if not active_only:
            parts.append(
                f', <a href="{n.defects}">Defect Reports List</a>, and '
                f'<a href="{n.closed}">Closed Issues List</a>'
            )
        parts.append(".</p>\n")
        if active_only:
            parts.append("<h2>Index by Section (non-Ready active issues only)</h2>\n")
            parts.append(f'<p><a href="{n.section_index}">(view all issues)</a></p>\n')
        else:
            parts.append("<h2>Index by Section</h2>\n")
            parts.append(f'<p><a href="{n.open_index}">(view only non-Ready open issues)</a></p>\n')
        parts.append(self.build_timestamp)

        for group in _runs(ordered, key=major):
            msn = major_section(self.section_index.locator_for(group[0].primary_tag))
            parts.append(
                f'<h2><a name="Section {msn}"></a>Section {msn} ({len(group)} issues)</h2>\n'
            )
            if active_only:
                parts.append(
                    f'<p><a href="{n.section_index}#Section {msn}">(view all issues)</a></p>\n'
                )
            elif major(group[0]) in open_majors:
                parts.append(
                    f'<p><a href="{n.open_index}#Section {msn}">'
                    "(view only non-Ready open issues)</a></p>\n"
                )
            parts.append(self.index_table(group))

        parts.append(file_trailer())
        return self._write(path, "".join(parts))

    def make_sort_by_priority(self, issues: Iterable[IssueRecord], path: Path) -> Path:
        """Grouped by priority (unprioritized last); within a priority by section."""
        ordered = _stable_sorted(
            issues,
            (by_section(self.section_index), False),
            (by_priority, False),
        )
        parts: list[str] = [
            file_header("Index by Priority"),
            self._list_heading(),
            "<h1>Index by Priority</h1>\n",
            self._index_intro("Index by Priority"),
            self.build_timestamp,
        ]
        for group in _runs(ordered, key=by_priority):
            first = group[0]
            label = f"Priority {first.priority}" if first.is_prioritized else "Not Prioritized"
            parts.append(f'<h2><a name="{label}"></a>{label} ({len(group)} issues)</h2>\n')
            parts.append(self.index_table(group))
        parts.append(file_trailer())
        return self._write(path, "".join(parts))


def _active_after_ready(ordered: list[IssueRecord]) -> list[IssueRecord]:
    """Slice of a status-sorted list: past the ``Ready`` block, up to the
    first non-active issue."""
    start = 0
    for idx, iss in enumerate(ordered):
        if iss.status == "Ready":
            start = idx
            break
    while start < len(ordered) and ordered[start].status == "Ready":
        start += 1
    end = start
    while end < len(ordered) and is_active(ordered[end].status):
        end += 1
    return ordered[start:end]
