"""Snapshot diff between two published issue lists.

A snapshot is the (number, status) of every issue at one point in time,
sorted by number. The previous snapshot is read back from the previous
mailing's table of contents; the current one comes from the parsed issues.

The diff is rendered as the revision-history fragment of the three main
documents:

    Summary:  open / closed / total counts with "up by N" / "down by N"
    Details:  issues added (grouped by status)
              issues changed (grouped by old -> new status)

Issue numbers are emitted as ``<iref ref="N"/>`` markers, resolved to
anchors later by the configuration store.
"""
from __future__ import annotations

import bisect
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from bs4 import BeautifulSoup

from issuelist.errors import SnapshotFormatError
from issuelist.issue_types import IssueRecord
from issuelist.status import is_active, priority_rank


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, order=True)
class SnapshotEntry:
    number: int
    status: str


Snapshot: TypeAlias = Sequence[SnapshotEntry]


@dataclass(frozen=True, slots=True)
class AddedGroup:
    """Issues new in this snapshot, all sharing one status."""

    status: str
    numbers: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ChangedGroup:
    """Issues that moved from ``old_status`` to ``new_status``."""

    old_status: str
    new_status: str
    numbers: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class IssueCounts:
    open: int
    closed: int

    @property
    def total(self) -> int:
        return self.open + self.closed


@dataclass(frozen=True, slots=True)
class SnapshotDiff:
    old_counts: IssueCounts
    new_counts: IssueCounts
    added: tuple[AddedGroup, ...]
    changed: tuple[ChangedGroup, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "old_counts": {"open": self.old_counts.open, "closed": self.old_counts.closed},
            "new_counts": {"open": self.new_counts.open, "closed": self.new_counts.closed},
            "added": [{"status": g.status, "numbers": list(g.numbers)} for g in self.added],
            "changed": [
                {"from": g.old_status, "to": g.new_status, "numbers": list(g.numbers)}
                for g in self.changed
            ],
        }


# ---------------------------------------------------------------------------
# Building snapshots
# ---------------------------------------------------------------------------


def read_snapshot(html: str) -> list[SnapshotEntry]:
    """Read (number, status) rows from a table-of-contents document.

    The first table row is the header. In each later row the first anchor
    holds the issue number and the second the status.

    Raises:
        SnapshotFormatError: no rows, or a row without a number and status.
    """
    soup = BeautifulSoup(html, "html.parser")
    rows = soup.find_all("tr")
    if not rows:
        raise SnapshotFormatError("Unable to find the first (title) row")

    entries: list[SnapshotEntry] = []
    for row in rows[1:]:
        anchors = row.find_all("a")
        if not anchors:
            raise SnapshotFormatError("unable to parse issue number: row has no anchors")
        number_text = anchors[0].get_text().strip()
        if not number_text.isdigit():
            raise SnapshotFormatError(f"unable to parse issue number {number_text!r}")
        if len(anchors) < 2:
            raise SnapshotFormatError(f"partial issue found: no status for issue {number_text}")
        entries.append(SnapshotEntry(int(number_text), anchors[1].get_text().strip()))

    entries.sort()
    return entries


def snapshot_from_issues(issues: Iterable[IssueRecord]) -> list[SnapshotEntry]:
    return sorted(SnapshotEntry(iss.number, iss.status) for iss in issues)


def _find_entry(snapshot: Snapshot, number: int) -> SnapshotEntry | None:
    idx = bisect.bisect_left(snapshot, number, key=lambda e: e.number)
    if idx < len(snapshot) and snapshot[idx].number == number:
        return snapshot[idx]
    return None


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def find_added_issues(old: Snapshot, new: Snapshot) -> list[AddedGroup]:
    """Issues in *new* absent from *old*, grouped by status in status order."""
    groups: dict[str, list[int]] = defaultdict(list)
    for entry in new:
        if _find_entry(old, entry.number) is None:
            groups[entry.status].append(entry.number)
    ordered = sorted(groups, key=lambda s: (priority_rank(s), s))
    return [AddedGroup(status=s, numbers=tuple(groups[s])) for s in ordered]


def find_changed_issues(old: Snapshot, new: Snapshot) -> list[ChangedGroup]:
    """Issues whose status changed, grouped by transition.

    Ordered by the new status's rank, then the old status's rank.
    """
    groups: dict[tuple[str, str], list[int]] = defaultdict(list)
    for entry in new:
        prev = _find_entry(old, entry.number)
        if prev is not None and prev.status != entry.status:
            groups[(prev.status, entry.status)].append(entry.number)

    def order(key: tuple[str, str]) -> tuple[int, int, str, str]:
        old_status, new_status = key
        return (priority_rank(new_status), priority_rank(old_status), new_status, old_status)

    return [
        ChangedGroup(old_status=o, new_status=n, numbers=tuple(groups[(o, n)]))
        for o, n in sorted(groups, key=order)
    ]


def count_issues(snapshot: Iterable[SnapshotEntry]) -> IssueCounts:
    """Open (Active category) vs closed (Defect and Closed) counts."""
    n_open = 0
    n_closed = 0
    for entry in snapshot:
        if is_active(entry.status):
            n_open += 1
        else:
            n_closed += 1
    return IssueCounts(open=n_open, closed=n_closed)


def diff_snapshots(old: Snapshot, new: Snapshot) -> SnapshotDiff:
    return SnapshotDiff(
        old_counts=count_issues(old),
        new_counts=count_issues(new),
        added=tuple(find_added_issues(old, new)),
        changed=tuple(find_changed_issues(old, new)),
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def describe_delta(new: int, old: int) -> str:
    if new >= old:
        return f"up by {new - old}"
    return f"down by {old - new}"


def _iref_list(numbers: Sequence[int]) -> str:
    return ", ".join(f'<iref ref="{n}"/>' for n in numbers)


def _render_summary(diff: SnapshotDiff) -> str:
    old, new = diff.old_counts, diff.new_counts
    return (
        f"<li>{new.open} open issues, {describe_delta(new.open, old.open)}.</li>\n"
        f"<li>{new.closed} closed issues, {describe_delta(new.closed, old.closed)}.</li>\n"
        f"<li>{new.total} issues total, {describe_delta(new.total, old.total)}.</li>\n"
    )


def _render_added(groups: Sequence[AddedGroup]) -> str:
    if not groups:
        return "<li>No issues added.</li>\n"
    lines: list[str] = []
    for g in groups:
        if len(g.numbers) == 1:
            lines.append(f"<li>Added the following {g.status} issue: {_iref_list(g.numbers)}.</li>\n")
        else:
            lines.append(
                f"<li>Added the following {len(g.numbers)} {g.status} issues: "
                f"{_iref_list(g.numbers)}.</li>\n"
            )
    return "".join(lines)


def _render_changed(groups: Sequence[ChangedGroup]) -> str:
    if not groups:
        return "<li>No issues changed.</li>\n"
    lines: list[str] = []
    for g in groups:
        if len(g.numbers) == 1:
            lines.append(
                f"<li>Changed the following issue to {g.new_status} (from {g.old_status}): "
                f"{_iref_list(g.numbers)}.</li>\n"
            )
        else:
            lines.append(
                f"<li>Changed the following {len(g.numbers)} issues to {g.new_status} "
                f"(from {g.old_status}): {_iref_list(g.numbers)}.</li>\n"
            )
    return "".join(lines)


def render_revision_report(diff: SnapshotDiff) -> str:
    """Render *diff* as the nested list fragment of the revision history."""
    return (
        "<ul>\n"
        "<li><b>Summary:</b><ul>\n"
        + _render_summary(diff)
        + "</ul></li>\n"
        "<li><b>Details:</b><ul>\n"
        + _render_added(diff.added)
        + _render_changed(diff.changed)
        + "</ul></li>\n"
        "</ul>\n"
    )
