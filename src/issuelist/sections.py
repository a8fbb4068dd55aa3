"""Section numbers of the governed standard and the tag -> number index.

A section of the standard is cited by a bracketed tag (``[vector]``) and
located by a hierarchical number (``23.3.6``, ``D.12``, ``TR1 2.1``):

- An optional technical-report prefix, ``TR1`` or ``TRDecimal``.
- A dot-separated path of integers and single upper-case letters. Letters
  are annex/sub-section labels and are stored as ``100 + offset``.

The section index maps tags to locators. It is built once from the section
reference table and afterwards only grows: a tag cited by an issue but
missing from the table is registered with ``UNKNOWN_SECTION``, which sorts
after every main-document section.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from issuelist.errors import SectionFormatError

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

_LETTER_BASE = 100
_LETTER_COUNT = 26


@dataclass(frozen=True, slots=True, order=True)
class SectionLocator:
    """Structured, totally ordered decomposition of a section number.

    Ordering compares ``prefix`` first, then ``components`` element-wise.
    """

    prefix: str                     # "" for the primary standard
    components: tuple[int, ...]     # (23, 3, 6); letters are 100 + offset

    def __post_init__(self) -> None:
        if not self.components:
            raise ValueError("components cannot be empty")


# Placeholder for tags missing from the reference table: one component past 'Z'.
UNKNOWN_SECTION = SectionLocator(prefix="", components=(_LETTER_BASE + _LETTER_COUNT,))

_TR_PREFIXES: tuple[str, ...] = ("TR1", "TRDecimal")

_NUMBER_RE = re.compile(r"^\d{1,2}$")
_LETTER_RE = re.compile(r"^[A-Z]$")


# ---------------------------------------------------------------------------
# Parse / format
# ---------------------------------------------------------------------------


def _parse_components(path: str, *, source: str) -> tuple[int, ...]:
    components: list[int] = []
    for part in path.split("."):
        if _NUMBER_RE.match(part):
            components.append(int(part))
        elif _LETTER_RE.match(part):
            components.append(_LETTER_BASE + ord(part) - ord("A"))
        else:
            raise SectionFormatError(
                f"section_num format error: bad component {part!r} in {source!r}"
            )
    return tuple(components)


def parse_section_locator(text: str) -> SectionLocator:
    """Parse ``"23.3.6"``, ``"D.12"`` or ``"TR1 2.1"`` into a locator.

    Raises:
        SectionFormatError: unknown ``TR`` prefix, empty path, or a component
            that is neither a number below 100 nor a single letter.
    """
    stripped = text.strip()
    if not stripped:
        raise SectionFormatError("section_num format error: empty section number")

    prefix = ""
    head, _, rest = stripped.partition(" ")
    if head.startswith("TR"):
        if head not in _TR_PREFIXES:
            raise SectionFormatError(
                f"section_num format error: unknown prefix {head!r}"
            )
        prefix = head
        stripped = rest.strip()
        if not stripped:
            raise SectionFormatError(
                f"section_num format error: no section after prefix in {text!r}"
            )

    return SectionLocator(prefix=prefix, components=_parse_components(stripped, source=text))


def _format_component(value: int) -> str:
    if value < _LETTER_BASE:
        return str(value)
    offset = value - _LETTER_BASE
    if offset < _LETTER_COUNT:
        return chr(ord("A") + offset)
    return "?"


def format_section_locator(locator: SectionLocator) -> str:
    """Render a locator as text; inverse of ``parse_section_locator``."""
    path = ".".join(_format_component(c) for c in locator.components)
    if locator.prefix:
        return f"{locator.prefix} {path}"
    return path


def major_section(locator: SectionLocator) -> str:
    """Render only the prefix and first component (``"23"``, ``"TR1 2"``)."""
    head = _format_component(locator.components[0])
    if locator.prefix:
        return f"{locator.prefix} {head}"
    return head


def remove_square_brackets(tag: str) -> str:
    """``"[vector]"`` -> ``"vector"``."""
    if len(tag) <= 2 or tag[0] != "[" or tag[-1] != "]":
        raise SectionFormatError(f"malformed section tag {tag!r}")
    return tag[1:-1]


# ---------------------------------------------------------------------------
# Section index
# ---------------------------------------------------------------------------


class SectionIndex:
    """Grow-only mapping from section tag to ``SectionLocator``.

    Entries are never overwritten or removed. Tags discovered while reading
    issues are registered with ``UNKNOWN_SECTION``.
    """

    def __init__(self, entries: Mapping[str, SectionLocator] | None = None) -> None:
        self._entries: dict[str, SectionLocator] = dict(entries or {})
        self._unknown: set[str] = set()

    def __contains__(self, tag: object) -> bool:
        return tag in self._entries

    def __getitem__(self, tag: str) -> SectionLocator:
        return self._entries[tag]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, tag: str) -> SectionLocator | None:
        return self._entries.get(tag)

    def items(self) -> list[tuple[str, SectionLocator]]:
        return list(self._entries.items())

    @property
    def unknown_tags(self) -> frozenset[str]:
        """Tags registered with the placeholder locator."""
        return frozenset(self._unknown)

    def register(self, tag: str, locator: SectionLocator) -> bool:
        """Insert *tag* unless already present. Returns True if inserted."""
        if tag in self._entries:
            return False
        self._entries[tag] = locator
        return True

    def register_unknown(self, tag: str) -> bool:
        """Register *tag* with the placeholder locator if it is not known."""
        inserted = self.register(tag, UNKNOWN_SECTION)
        if inserted:
            self._unknown.add(tag)
            log.warning("section tag %s is not in the section index", tag)
        return inserted

    def locator_for(self, tag: str) -> SectionLocator:
        """Look up *tag*, registering the placeholder for an unknown tag."""
        self.register_unknown(tag)
        return self._entries[tag]

    def format_tag(self, tag: str) -> str:
        """``"23.3.6 [vector]"`` -- locator followed by the tag itself."""
        return f"{format_section_locator(self.locator_for(tag))} {tag}"


def read_section_index(text: str) -> SectionIndex:
    """Build a ``SectionIndex`` from the section reference table.

    One entry per line: ``<path> <[tag]>``. Tags starting ``[tr.`` belong to
    TR1 and tags starting ``[trdec.`` to the decimal TR; such lines may also
    spell the prefix at the start of the path.

    Raises:
        SectionFormatError: naming the offending line number.
    """
    index = SectionIndex()
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        p = line.rfind("[")
        if not line.endswith("]") or p <= 0:
            raise SectionFormatError(f"section table line {lineno}: missing [tag] in {line!r}")
        tag = line[p:]
        if len(tag) <= 2:
            raise SectionFormatError(f"section table line {lineno}: empty tag")
        path = line[:p].strip()

        prefix = ""
        if tag.startswith("[trdec."):
            prefix = "TRDecimal"
        elif tag.startswith("[tr."):
            prefix = "TR1"
        if prefix:
            head, _, rest = path.partition(" ")
            if head == prefix:
                path = rest.strip()

        if not path:
            raise SectionFormatError(f"section table line {lineno}: missing section number")
        try:
            components = _parse_components(path, source=line)
        except SectionFormatError as exc:
            raise SectionFormatError(f"section table line {lineno}: {exc}") from exc
        index.register(tag, SectionLocator(prefix=prefix, components=components))

    log.debug("read %d section tags", len(index))
    return index
