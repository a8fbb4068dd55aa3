"""Error taxonomy for issue-list publishing.

Every failure raised by the library derives from ``IssueListError`` so the
command line tools can report any of them uniformly. None of these are
retried: they describe malformed authoring input.
"""
from __future__ import annotations


class IssueListError(RuntimeError):
    """Base class for all issue-list failures."""


class UnknownStatusError(IssueListError):
    """Raised when a status label has no publication category."""

    def __init__(self, status: str, filename: str | None = None) -> None:
        where = f" in {filename}" if filename is not None else ""
        super().__init__(f"unknown status {status}{where}")
        self.status = status
        self.filename = filename


class SectionFormatError(IssueListError):
    """Raised for a malformed section number or section-table line."""


class DuplicateIssueError(IssueListError):
    """Raised when two records in one collection share an issue number."""

    def __init__(self, number: int) -> None:
        super().__init__(f"issue number {number} appears more than once")
        self.number = number


class SnapshotFormatError(IssueListError):
    """Raised when a snapshot (table of contents) document cannot be read."""


class ConfigError(IssueListError):
    """Raised for a missing or malformed entry in config.xml."""


# ---------------------------------------------------------------------------
# Issue file parsing
# ---------------------------------------------------------------------------


class IssueParseError(IssueListError):
    """Failure to parse one issue file."""

    def __init__(self, filename: str, message: str) -> None:
        super().__init__(f"Error parsing issue file {filename}: {message}")
        self.filename = filename
        self.reason = message


class MissingIssueNumberError(IssueParseError):
    pass


class MissingStatusError(IssueParseError):
    pass


class MissingTitleError(IssueParseError):
    pass


class MissingSectionError(IssueParseError):
    pass


class MissingSubmitterError(IssueParseError):
    pass


class MissingDateError(IssueParseError):
    pass


class MissingDiscussionError(IssueParseError):
    pass


class BadDateError(IssueParseError):
    pass


class BadPriorityValueError(IssueParseError):
    pass


class IssueNumberMismatchError(IssueParseError):
    pass


# ---------------------------------------------------------------------------
# Markup transformation
# ---------------------------------------------------------------------------


class MarkupError(IssueListError):
    """Failure to transform the markup of one issue."""

    def __init__(self, issue_number: int, message: str) -> None:
        super().__init__(f"{message} in issue {issue_number}")
        self.issue_number = issue_number


class UnterminatedTagError(MarkupError):
    pass


class EmptyTagError(MarkupError):
    pass


class MismatchedTagError(MarkupError):
    """A closing tag that does not match the innermost open tag."""

    def __init__(self, issue_number: int, open_tag: str | None, close_tag: str) -> None:
        if open_tag is None:
            detail = "Had no open tag."
        else:
            detail = f"Open tag was {open_tag}."
        super().__init__(
            issue_number,
            f"mismatched tags ({detail}  Closing tag was {close_tag})",
        )
        self.open_tag = open_tag
        self.close_tag = close_tag


class MalformedSrefError(MarkupError):
    pass


class MalformedIrefError(MarkupError):
    pass


class UnresolvedIrefError(MarkupError):
    def __init__(self, issue_number: int, ref: int) -> None:
        super().__init__(issue_number, f"could not find issue {ref} for iref")
        self.ref = ref
