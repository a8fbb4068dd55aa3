"""Issue markup transformation: lexer, rewriter, and collection preparation."""

from issuelist.markup.lexer import lex_markup
from issuelist.markup.rewriter import (
    apply_duplicate_links,
    markup_error_text,
    prepare_issues,
    rewrite_markup,
    transform_issue,
)
from issuelist.markup.types import (
    CloseTag,
    Comment,
    DuplicateLink,
    EndOfIssue,
    MarkupEvent,
    OpenTag,
    RewriteResult,
    SelfClosingTag,
    TextRun,
)

__all__ = [
    "CloseTag",
    "Comment",
    "DuplicateLink",
    "EndOfIssue",
    "MarkupEvent",
    "OpenTag",
    "RewriteResult",
    "SelfClosingTag",
    "TextRun",
    "apply_duplicate_links",
    "lex_markup",
    "markup_error_text",
    "prepare_issues",
    "rewrite_markup",
    "transform_issue",
]
