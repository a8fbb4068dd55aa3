"""Issue record type, anchors, and the orderings used by published documents."""
from __future__ import annotations

import bisect
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date

from issuelist.file_names import FileNames
from issuelist.sections import SectionIndex, SectionLocator
from issuelist.status import priority_rank

UNPRIORITIZED = 99
MAX_PRIORITY = 4


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class IssueRecord:
    """One tracked issue, as parsed from its issue file.

    ``body_text`` and ``resolution_text`` hold raw markup until the markup
    transformer rewrites them; ``duplicates`` is filled in by the transformer
    with rendered anchors, on both ends of each duplicate relationship.
    """

    number: int
    status: str
    title: str
    section_tags: tuple[str, ...]
    submitter: str
    filed_date: date
    last_modified_date: date
    body_text: str
    resolution_text: str = ""
    has_resolution: bool = True
    priority: int = UNPRIORITIZED
    owner: str | None = None
    duplicates: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        if self.number <= 0:
            raise ValueError(f"issue number must be positive, got {self.number}")
        if not self.section_tags:
            raise ValueError(f"issue {self.number} has no section tags")
        if self.priority != UNPRIORITIZED and not 0 <= self.priority <= MAX_PRIORITY:
            raise ValueError(f"priority must be in [0, {MAX_PRIORITY}], got {self.priority}")

    @property
    def primary_tag(self) -> str:
        return self.section_tags[0]

    @property
    def is_prioritized(self) -> bool:
        return self.priority != UNPRIORITIZED


# ---------------------------------------------------------------------------
# Anchors
# ---------------------------------------------------------------------------


def make_html_anchor(issue: IssueRecord, names: FileNames | None = None) -> str:
    """Link to *issue* inside the document its status publishes it in."""
    names = names or FileNames()
    num = str(issue.number)
    return f'<a href="{names.filename_for_status(issue.status)}#{num}">{num}</a>'


def make_ref_string(issue: IssueRecord) -> str:
    """Same-document link to *issue*, used in index tables."""
    num = str(issue.number)
    return f'<a href="#{num}">{num}</a>'


# ---------------------------------------------------------------------------
# Lookup and ordering
# ---------------------------------------------------------------------------


def find_issue_index(issues: Sequence[IssueRecord], number: int) -> int | None:
    """Binary search a number-sorted collection; None when absent."""
    lo = bisect.bisect_left(issues, number, key=lambda iss: iss.number)
    if lo < len(issues) and issues[lo].number == number:
        return lo
    return None


def by_number(issue: IssueRecord) -> int:
    return issue.number


def by_status(issue: IssueRecord) -> int:
    return priority_rank(issue.status)


def by_first_tag(issue: IssueRecord) -> str:
    return issue.primary_tag


def by_priority(issue: IssueRecord) -> int:
    return issue.priority


def by_section(section_index: SectionIndex) -> Callable[[IssueRecord], SectionLocator]:
    """Key on the locator of the issue's first section tag."""

    def key(issue: IssueRecord) -> SectionLocator:
        return section_index.locator_for(issue.primary_tag)

    return key


def by_major_section(section_index: SectionIndex) -> Callable[[IssueRecord], tuple[str, int]]:
    def key(issue: IssueRecord) -> tuple[str, int]:
        loc = section_index.locator_for(issue.primary_tag)
        return (loc.prefix, loc.components[0])

    return key


def is_sorted_by_number(issues: Sequence[IssueRecord]) -> bool:
    return all(a.number < b.number for a, b in zip(issues, issues[1:]))
