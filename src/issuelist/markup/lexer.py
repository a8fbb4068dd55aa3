"""Tokenizer for issue markup.

Splits issue text into an immutable event sequence. Only the shape of each
tag is decided here (open, close, self-closing, comment, end-of-issue);
what a tag means is the rewriter's concern.
"""

from __future__ import annotations

from issuelist.errors import EmptyTagError, UnterminatedTagError
from issuelist.markup.types import (
    CloseTag,
    Comment,
    EndOfIssue,
    MarkupEvent,
    OpenTag,
    SelfClosingTag,
    TextRun,
)

_END_TAGS: frozenset[str] = frozenset({"issue", "revision"})
_COMMENT_START = "<!--"
_COMMENT_END = "-->"


def _first_quoted(raw: str) -> str | None:
    k = raw.find('"')
    if k < 0:
        return None
    close = raw.find('"', k + 1)
    if close < 0:
        return None
    return raw[k + 1:close]


def lex_markup(text: str, issue_number: int) -> tuple[MarkupEvent, ...]:
    """Scan *text* left to right into markup events.

    A closing ``issue``/``revision`` tag ends the scan; any text after it
    is emitted unchanged as one trailing ``TextRun``.

    Raises:
        UnterminatedTagError: a ``<`` with no ``>``, or a comment with no
            ``-->``.
        EmptyTagError: ``<>`` or ``</>``.
    """
    events: list[MarkupEvent] = []
    pos = 0
    size = len(text)
    while pos < size:
        lt = text.find("<", pos)
        if lt < 0:
            events.append(TextRun(text=text[pos:], offset=pos))
            break
        if lt > pos:
            events.append(TextRun(text=text[pos:lt], offset=pos))

        gt = text.find(">", lt)
        if gt < 0:
            raise UnterminatedTagError(issue_number, f"missing '>' after offset {lt}")

        words = text[lt + 1:gt].split()
        if not words:
            raise EmptyTagError(issue_number, "unexpected <>")
        word = words[0]

        if word.startswith("!--"):
            end = text.find(_COMMENT_END, lt + len(_COMMENT_START))
            if end < 0:
                raise UnterminatedTagError(issue_number, f"missing '-->' after offset {lt}")
            end += len(_COMMENT_END)
            events.append(Comment(raw=text[lt:end], offset=lt))
            pos = end
            continue

        raw = text[lt:gt + 1]
        if word.startswith("/"):
            name = word[1:]
            if not name:
                raise EmptyTagError(issue_number, "unexpected </>")
            if name in _END_TAGS:
                events.append(EndOfIssue(name=name, raw=raw, offset=lt))
                if gt + 1 < size:
                    events.append(TextRun(text=text[gt + 1:], offset=gt + 1))
                break
            events.append(CloseTag(name=name, raw=raw, offset=lt))
        elif text[gt - 1] == "/":
            name = word.rstrip("/")
            if not name:
                raise EmptyTagError(issue_number, "unexpected </>")
            events.append(
                SelfClosingTag(name=name, raw=raw, offset=lt, quoted_value=_first_quoted(raw)),
            )
        else:
            events.append(OpenTag(name=word, raw=raw, offset=lt))
        pos = gt + 1

    return tuple(events)
