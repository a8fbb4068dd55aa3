"""Event and result types for the issue markup lexer and rewriter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class TextRun:
    """Literal text between tags."""

    text: str
    offset: int


@dataclass(frozen=True, slots=True)
class OpenTag:
    """``<name ...>``; pushed on the rewriter's tag stack."""

    name: str
    raw: str
    offset: int

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("tag name cannot be empty")


@dataclass(frozen=True, slots=True)
class CloseTag:
    """``</name>``; must match the innermost open tag."""

    name: str
    raw: str
    offset: int

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("tag name cannot be empty")


@dataclass(frozen=True, slots=True)
class SelfClosingTag:
    """``<name .../>``, e.g. ``<sref ref="[vector]"/>`` or ``<iref ref="42"/>``.

    ``quoted_value`` is the first double-quoted attribute value, or None when
    the tag has no complete pair of quotes.
    """

    name: str
    raw: str
    offset: int
    quoted_value: str | None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("tag name cannot be empty")


@dataclass(frozen=True, slots=True)
class Comment:
    """``<!-- ... -->``; dropped by the rewriter."""

    raw: str
    offset: int


@dataclass(frozen=True, slots=True)
class EndOfIssue:
    """``</issue>`` or ``</revision>``; scanning stops here."""

    name: str
    raw: str
    offset: int


MarkupEvent: TypeAlias = TextRun | OpenTag | CloseTag | SelfClosingTag | Comment | EndOfIssue


@dataclass(frozen=True, slots=True)
class DuplicateLink:
    """Request to link two issues as duplicates of each other.

    Both fields are indices into the number-sorted issue collection.
    """

    source: int
    target: int

    def __post_init__(self) -> None:
        if self.source < 0 or self.target < 0:
            raise ValueError("duplicate link indices must be >= 0")


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Rewritten text plus the duplicate links discovered while rewriting."""

    text: str
    duplicate_links: tuple[DuplicateLink, ...]
