"""Issue file parser.

An issue file is loosely tagged text. The parser does not build a document
tree; it scans for a fixed sequence of markers, in order:

    <issue num="N" status="S">
    <title>...</title>
    <section><sref ref="[tag]"/> ...</section>
    <submitter>...</submitter>
    <date>14 Mar 2015</date>
    <owner>...</owner>          (optional)
    <priority>2</priority>      (optional)
    <discussion> ... free text with pseudo-tags ... </issue>

Everything from ``<discussion>`` onwards is kept verbatim as the body text
for the markup transformer.
"""
from __future__ import annotations

import logging
from datetime import date

from issuelist.errors import (
    BadDateError,
    BadPriorityValueError,
    IssueNumberMismatchError,
    MissingDateError,
    MissingDiscussionError,
    MissingIssueNumberError,
    MissingSectionError,
    MissingStatusError,
    MissingSubmitterError,
    MissingTitleError,
    UnknownStatusError,
)
from issuelist.issue_types import MAX_PRIORITY, UNPRIORITIZED, IssueRecord
from issuelist.sections import SectionIndex
from issuelist.status import publication_category

log = logging.getLogger(__name__)

_ISSUE_NUM_MARKER = '<issue num="'
_STATUS_MARKER = 'status="'

# Shorter proposed resolutions are whitespace between tags, not a resolution.
MIN_RESOLUTION_LENGTH = 15

_MONTHS: dict[str, int] = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_date(text: str) -> date:
    """Parse ``"14 Mar 2015"``. Raises ValueError on any malformation."""
    parts = text.split()
    if len(parts) != 3 or not parts[0].isdigit():
        raise ValueError(f"date format error: {text.strip()!r}")
    month = _MONTHS.get(parts[1])
    if month is None:
        raise ValueError(f"unknown month {parts[1]}")
    if not parts[2].isdigit():
        raise ValueError(f"date format error: bad year {parts[2]!r}")
    return date(int(parts[2]), month, int(parts[0]))


def _find_element(text: str, name: str, start: int, end: int = -1) -> tuple[str, int] | None:
    """Return (content, close_pos) of the first ``<name>...</name>`` after *start*.

    None when the opening tag is absent (before *end*, if given) or never
    closed.
    """
    open_tag = f"<{name}>"
    k = text.find(open_tag, start, end if end >= 0 else len(text))
    if k < 0:
        return None
    k += len(open_tag)
    close = text.find(f"</{name}>", k)
    if close < 0:
        return None
    return text[k:close], close


def _read_issue_number(raw_text: str, filename: str) -> tuple[int, int]:
    k = raw_text.find(_ISSUE_NUM_MARKER)
    if k < 0:
        raise MissingIssueNumberError(filename, "Unable to find issue number")
    k += len(_ISSUE_NUM_MARKER)
    close = raw_text.find('"', k)
    if close < 0:
        raise MissingIssueNumberError(filename, "Corrupt issue number attribute")
    value = raw_text[k:close].strip()
    if not value.isdigit() or int(value) <= 0:
        raise MissingIssueNumberError(filename, f"Bad issue number {value!r}")
    return int(value), close


def _read_section_tags(
    raw_text: str, start: int, filename: str, section_index: SectionIndex,
) -> tuple[tuple[str, ...], int]:
    found = _find_element(raw_text, "section", start)
    if found is None:
        raise MissingSectionError(filename, "Unable to find issue section")
    content, close = found

    tags: list[str] = []
    pos = 0
    while True:
        k = content.find('"', pos)
        if k < 0:
            break
        k2 = content.find('"', k + 1)
        if k2 < 0:
            raise MissingSectionError(filename, "Unterminated section tag")
        tags.append(content[k + 1:k2])
        pos = k2 + 1

    if not tags:
        raise MissingSectionError(filename, "Unable to find issue section")
    for tag in tags:
        if section_index.register_unknown(tag):
            log.debug("registered placeholder section for %s from %s", tag, filename)
    return tuple(tags), close


def _read_priority(header: str, filename: str) -> int:
    k = header.find("<priority>")
    if k < 0:
        return UNPRIORITIZED
    k += len("<priority>")
    close = header.find("</priority>", k)
    if close < 0:
        raise BadPriorityValueError(filename, "Corrupt 'priority' element: no closing tag")
    value = header[k:close].strip()
    if not value.isdigit():
        raise BadPriorityValueError(filename, f"Bad priority value {value!r}")
    priority = int(value)
    if priority != UNPRIORITIZED and priority > MAX_PRIORITY:
        raise BadPriorityValueError(filename, f"Priority {priority} out of range 0..{MAX_PRIORITY}")
    return priority


def _extract_resolution(body: str) -> str:
    k = body.find("<resolution>")
    if k < 0:
        return ""
    k += len("<resolution>")
    close = body.find("</resolution>", k)
    if close < 0:
        close = len(body)
    resolution = body[k:close]
    # Counts raw markup, tags included.
    if len(resolution) < MIN_RESOLUTION_LENGTH:
        return ""
    return resolution


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_issue(
    raw_text: str,
    filename: str,
    section_index: SectionIndex,
    *,
    last_modified: date,
) -> IssueRecord:
    """Parse one issue file into an ``IssueRecord``.

    Section tags missing from *section_index* are registered in it with the
    placeholder locator. *last_modified* comes from the file metadata.

    Raises:
        IssueParseError: a subclass naming the missing or malformed marker.
        UnknownStatusError: the status has no publication category.
    """
    number, pos = _read_issue_number(raw_text, filename)

    k = raw_text.find(_STATUS_MARKER, pos)
    if k < 0:
        raise MissingStatusError(filename, "Unable to find issue status")
    k += len(_STATUS_MARKER)
    pos = raw_text.find('"', k)
    if pos < 0:
        raise MissingStatusError(filename, "Corrupt status attribute")
    status = raw_text[k:pos]

    found = _find_element(raw_text, "title", pos)
    if found is None:
        raise MissingTitleError(filename, "Unable to find issue title")
    title, pos = found

    section_tags, pos = _read_section_tags(raw_text, pos, filename, section_index)

    found = _find_element(raw_text, "submitter", pos)
    if found is None:
        raise MissingSubmitterError(filename, "Unable to find issue submitter")
    submitter, pos = found

    found = _find_element(raw_text, "date", pos)
    if found is None:
        raise MissingDateError(filename, "Unable to find issue date")
    date_text, pos = found
    try:
        filed = parse_date(date_text)
    except ValueError as exc:
        raise BadDateError(filename, str(exc)) from exc

    disc = raw_text.find("<discussion>", pos)
    if disc < 0:
        raise MissingDiscussionError(filename, "Unable to find issue discussion")

    header = raw_text[pos:disc]
    priority = _read_priority(header, filename)
    owner_found = _find_element(header, "owner", 0)
    owner = owner_found[0].strip() if owner_found is not None else None

    body = raw_text[disc:]

    try:
        category = publication_category(status)
    except UnknownStatusError as exc:
        raise UnknownStatusError(exc.status, filename) from exc

    if category == "Active":
        resolution = _extract_resolution(body)
        has_resolution = bool(resolution)
    else:
        resolution = ""
        has_resolution = True

    return IssueRecord(
        number=number,
        status=status,
        title=title,
        section_tags=section_tags,
        submitter=submitter,
        filed_date=filed,
        last_modified_date=last_modified,
        body_text=body,
        resolution_text=resolution,
        has_resolution=has_resolution,
        priority=priority,
        owner=owner or None,
    )


def replace_status(raw_text: str, issue_number: int, new_status: str, filename: str) -> str:
    """Return *raw_text* with the status attribute replaced by *new_status*.

    Purely textual; the rest of the file is untouched.

    Raises:
        IssueNumberMismatchError: the file is for a different issue.
    """
    number, pos = _read_issue_number(raw_text, filename)
    if number != issue_number:
        raise IssueNumberMismatchError(
            filename, f"Issue number {number} does not match requested {issue_number}",
        )
    k = raw_text.find(_STATUS_MARKER, pos)
    if k < 0:
        raise MissingStatusError(filename, "Unable to find issue status")
    k += len(_STATUS_MARKER)
    close = raw_text.find('"', k)
    if close < 0:
        raise MissingStatusError(filename, "Corrupt status attribute")
    return raw_text[:k] + new_status + raw_text[close:]
