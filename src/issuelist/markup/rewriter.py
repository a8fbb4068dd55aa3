"""Rewrite issue markup into publishable HTML.

Replacement table:

    tag           opening                               closing
    ---           -------                               -------
    discussion    <p><b>Discussion:</b></p>             (removed)
    resolution    <p><b>Proposed resolution:</b></p>    (removed)
    rationale     <p><b>Rationale:</b></p>              (removed)
    duplicate     (removed)                             (removed)
    note          <p><i>[                               ]</i></p>
    other         unchanged                             unchanged

    <sref ref="[tag]"/>   "<section number> [tag]"
    <iref ref="N"/>       anchor to issue N in the document it is published
                          in; inside <duplicate> it is removed and the two
                          issues are linked as duplicates instead.
    <!-- ... -->          removed

The rewriter only reads the issue collection. Duplicate links are returned
as index pairs and applied afterwards by ``apply_duplicate_links``.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence

from issuelist.errors import (
    DuplicateIssueError,
    MalformedIrefError,
    MalformedSrefError,
    MarkupError,
    MismatchedTagError,
    UnresolvedIrefError,
)
from issuelist.file_names import FileNames
from issuelist.issue_types import IssueRecord, find_issue_index, make_html_anchor
from issuelist.markup.lexer import lex_markup
from issuelist.markup.types import (
    CloseTag,
    DuplicateLink,
    MarkupEvent,
    OpenTag,
    RewriteResult,
    SelfClosingTag,
    TextRun,
)
from issuelist.sections import SectionIndex

log = logging.getLogger(__name__)

_OPEN_REPLACEMENTS: dict[str, str] = {
    "discussion": "<p><b>Discussion:</b></p>",
    "resolution": "<p><b>Proposed resolution:</b></p>",
    "rationale": "<p><b>Rationale:</b></p>",
    "duplicate": "",
    "note": "<p><i>[",
}

_CLOSE_REPLACEMENTS: dict[str, str] = {
    "discussion": "",
    "resolution": "",
    "rationale": "",
    "duplicate": "",
    "note": "]</i></p>\n",
}


def _resolve_iref(
    tag: SelfClosingTag, issue_number: int, issues: Sequence[IssueRecord],
) -> int:
    if tag.quoted_value is None:
        raise MalformedIrefError(issue_number, "missing '\"' in iref")
    value = tag.quoted_value.strip()
    if not value.isdigit():
        raise MalformedIrefError(issue_number, f"bad number {value!r} in iref")
    ref = int(value)
    idx = find_issue_index(issues, ref)
    if idx is None:
        raise UnresolvedIrefError(issue_number, ref)
    return idx


def rewrite_markup(
    events: Sequence[MarkupEvent],
    *,
    issue_number: int,
    issues: Sequence[IssueRecord],
    section_index: SectionIndex,
    names: FileNames | None = None,
) -> RewriteResult:
    """Build the rewritten text for one issue from its markup events.

    *issues* must be sorted by number. Unknown ``sref`` tags are registered
    in *section_index* with the placeholder locator.

    Raises:
        MarkupError: a subclass describing the fault, naming *issue_number*.
    """
    out: list[str] = []
    stack: list[str] = []
    links: list[DuplicateLink] = []

    for event in events:
        if isinstance(event, TextRun):
            out.append(event.text)
        elif isinstance(event, OpenTag):
            stack.append(event.name)
            out.append(_OPEN_REPLACEMENTS.get(event.name, event.raw))
        elif isinstance(event, CloseTag):
            if not stack or stack[-1] != event.name:
                raise MismatchedTagError(issue_number, stack[-1] if stack else None, event.name)
            stack.pop()
            out.append(_CLOSE_REPLACEMENTS.get(event.name, event.raw))
        elif isinstance(event, SelfClosingTag):
            if event.name == "sref":
                if event.quoted_value is None:
                    raise MalformedSrefError(issue_number, "missing '\"' in sref")
                out.append(section_index.format_tag(event.quoted_value))
            elif event.name == "iref":
                target = _resolve_iref(event, issue_number, issues)
                if stack and stack[-1] == "duplicate":
                    source = find_issue_index(issues, issue_number)
                    if source is None:
                        raise MarkupError(issue_number, "duplicate of an issue outside the collection")
                    links.append(DuplicateLink(source=source, target=target))
                else:
                    out.append(make_html_anchor(issues[target], names))
            else:
                out.append(event.raw)
        # Comment and EndOfIssue produce no output.

    return RewriteResult(text="".join(out), duplicate_links=tuple(links))


def apply_duplicate_links(
    issues: Sequence[IssueRecord],
    links: Sequence[DuplicateLink],
    names: FileNames | None = None,
) -> None:
    """Record each link on both issues, by index into *issues*."""
    for link in links:
        source = issues[link.source]
        target = issues[link.target]
        target.duplicates.add(make_html_anchor(source, names))
        source.duplicates.add(make_html_anchor(target, names))


def transform_issue(
    issue: IssueRecord,
    issues: Sequence[IssueRecord],
    section_index: SectionIndex,
    *,
    names: FileNames | None = None,
) -> tuple[DuplicateLink, ...]:
    """Rewrite *issue*'s body and resolution text in place.

    Both texts are rewritten before anything is mutated, so a failure leaves
    *issue* and its peers untouched. Returns the duplicate links applied.
    """
    body = rewrite_markup(
        lex_markup(issue.body_text, issue.number),
        issue_number=issue.number,
        issues=issues,
        section_index=section_index,
        names=names,
    )
    resolution = rewrite_markup(
        lex_markup(issue.resolution_text, issue.number),
        issue_number=issue.number,
        issues=issues,
        section_index=section_index,
        names=names,
    )

    issue.body_text = body.text
    issue.resolution_text = resolution.text
    links = body.duplicate_links + resolution.duplicate_links
    apply_duplicate_links(issues, links, names)
    return links


def markup_error_text(issue: IssueRecord, error: MarkupError) -> str:
    """Body for an issue whose markup could not be rewritten: the error and
    the escaped source, which already spans the resolution."""
    return (
        f'<p><font color="red"><b>Markup error:</b> {html.escape(str(error))}</font></p>\n'
        f"<pre>\n{html.escape(issue.body_text)}\n</pre>\n"
    )


def prepare_issues(
    issues: list[IssueRecord],
    section_index: SectionIndex,
    *,
    names: FileNames | None = None,
    skip_errors: bool = False,
) -> list[MarkupError]:
    """Sort *issues* by number, then transform every issue's markup.

    With *skip_errors*, an issue whose markup fails is published with a
    markup error notice and its escaped source (see ``markup_error_text``).
    The failure is logged and returned. Otherwise the first failure is raised.

    Raises:
        DuplicateIssueError: two issues share a number.
        MarkupError: the first markup failure, unless *skip_errors*.
    """
    issues.sort(key=lambda iss: iss.number)
    for prev, curr in zip(issues, issues[1:]):
        if prev.number == curr.number:
            raise DuplicateIssueError(curr.number)

    failures: list[MarkupError] = []
    for issue in issues:
        try:
            transform_issue(issue, issues, section_index, names=names)
        except MarkupError as exc:
            if not skip_errors:
                raise
            log.warning("publishing issue %d with a markup error: %s", issue.number, exc)
            issue.body_text = markup_error_text(issue, exc)
            issue.resolution_text = ""
            failures.append(exc)

    log.debug("transformed %d issues (%d failures)", len(issues), len(failures))
    return failures
