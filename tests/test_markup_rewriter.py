"""Tests for issuelist.markup.rewriter."""
from __future__ import annotations

from datetime import date

import pytest

from issuelist.errors import (
    DuplicateIssueError,
    MalformedIrefError,
    MalformedSrefError,
    MismatchedTagError,
    UnresolvedIrefError,
    UnterminatedTagError,
)
from issuelist.issue_types import IssueRecord
from issuelist.markup import (
    DuplicateLink,
    lex_markup,
    prepare_issues,
    rewrite_markup,
    transform_issue,
)
from issuelist.sections import UNKNOWN_SECTION, SectionIndex, SectionLocator


def make_issue(number: int, body: str, status: str = "Open", resolution: str = "") -> IssueRecord:
    return IssueRecord(
        number=number,
        status=status,
        title=f"Issue {number}",
        section_tags=("[vector]",),
        submitter="Jane Doe",
        filed_date=date(2015, 3, 14),
        last_modified_date=date(2015, 5, 1),
        body_text=body,
        resolution_text=resolution,
    )


def make_index() -> SectionIndex:
    return SectionIndex({"[vector]": SectionLocator("", (23, 3, 6))})


def rewrite(text: str, issues: list[IssueRecord] | None = None, number: int = 1) -> str:
    issues = issues if issues is not None else [make_issue(number, text)]
    result = rewrite_markup(
        lex_markup(text, number),
        issue_number=number,
        issues=issues,
        section_index=make_index(),
    )
    return result.text


class TestReplacements:
    def test_discussion(self) -> None:
        assert rewrite("<discussion>Some text.</discussion>") == (
            "<p><b>Discussion:</b></p>Some text."
        )

    def test_resolution_and_rationale(self) -> None:
        out = rewrite("<resolution>A</resolution><rationale>B</rationale>")
        assert out == "<p><b>Proposed resolution:</b></p>A<p><b>Rationale:</b></p>B"

    def test_note(self) -> None:
        assert rewrite("<note>careful</note>") == "<p><i>[careful]</i></p>\n"

    def test_other_tags_unchanged(self) -> None:
        text = '<p>See <tt>x</tt> and <blockquote class="note">q</blockquote><br/></p>'
        assert rewrite(text) == text

    def test_comment_removed(self) -> None:
        assert rewrite("a<!-- hidden -->b") == "ab"

    def test_end_of_issue_dropped_and_trailer_kept(self) -> None:
        assert rewrite("<discussion>x</discussion></issue>\n") == "<p><b>Discussion:</b></p>x\n"


class TestReferences:
    def test_sref_known(self) -> None:
        assert rewrite('<sref ref="[vector]"/>') == "23.3.6 [vector]"

    def test_sref_unknown_registers_placeholder(self) -> None:
        index = make_index()
        issues = [make_issue(1, "")]
        result = rewrite_markup(
            lex_markup('<sref ref="[nowhere]"/>', 1),
            issue_number=1, issues=issues, section_index=index,
        )
        assert result.text == "? [nowhere]"
        assert index["[nowhere]"] == UNKNOWN_SECTION

    def test_sref_missing_quote(self) -> None:
        with pytest.raises(MalformedSrefError, match="in issue 1"):
            rewrite("<sref ref=[vector]/>")

    def test_iref_anchor(self) -> None:
        issues = [make_issue(1, ""), make_issue(20, "", status="WP")]
        assert rewrite('See <iref ref="20"/>.', issues) == (
            'See <a href="lwg-defects.html#20">20</a>.'
        )

    def test_iref_unresolved(self) -> None:
        with pytest.raises(UnresolvedIrefError, match="could not find issue 999") as excinfo:
            rewrite('<iref ref="999"/>')
        assert excinfo.value.ref == 999
        assert excinfo.value.issue_number == 1

    def test_iref_not_a_number(self) -> None:
        with pytest.raises(MalformedIrefError):
            rewrite('<iref ref="abc"/>')

    def test_iref_missing_quote(self) -> None:
        with pytest.raises(MalformedIrefError):
            rewrite("<iref ref=20/>")


class TestStructure:
    def test_mismatched_close(self) -> None:
        with pytest.raises(MismatchedTagError, match="Open tag was note.  Closing tag was discussion"):
            rewrite("<note>x</discussion>")

    def test_close_without_open(self) -> None:
        with pytest.raises(MismatchedTagError, match="Had no open tag") as excinfo:
            rewrite("x</note>")
        assert excinfo.value.open_tag is None
        assert excinfo.value.close_tag == "note"


class TestDuplicates:
    def test_duplicate_span_collects_link(self) -> None:
        issues = [make_issue(10, ""), make_issue(20, "")]
        result = rewrite_markup(
            lex_markup('<duplicate><iref ref="20"/></duplicate>', 10),
            issue_number=10, issues=issues, section_index=make_index(),
        )
        assert result.text == ""
        assert result.duplicate_links == (DuplicateLink(source=0, target=1),)

    def test_transform_links_both_ways(self) -> None:
        body = '<discussion>Same.</discussion><duplicate><iref ref="20"/></duplicate>'
        issues = [make_issue(10, body), make_issue(20, "<discussion>x</discussion>", status="NAD")]
        links = transform_issue(issues[0], issues, make_index())
        assert links == (DuplicateLink(source=0, target=1),)
        assert issues[0].duplicates == {'<a href="lwg-closed.html#20">20</a>'}
        assert issues[1].duplicates == {'<a href="lwg-active.html#10">10</a>'}
        assert issues[0].body_text == "<p><b>Discussion:</b></p>Same."

    def test_iref_outside_duplicate_is_anchor(self) -> None:
        issues = [make_issue(10, ""), make_issue(20, "")]
        out = rewrite('<note><iref ref="20"/></note>', issues, number=10)
        assert out == '<p><i>[<a href="lwg-active.html#20">20</a>]</i></p>\n'


class TestTransformIssue:
    def test_rewrites_resolution_too(self) -> None:
        iss = make_issue(1, "<discussion>d</discussion>", resolution='<p><sref ref="[vector]"/></p>')
        transform_issue(iss, [iss], make_index())
        assert iss.resolution_text == "<p>23.3.6 [vector]</p>"

    def test_failure_leaves_issue_untouched(self) -> None:
        body = "<discussion>ok</discussion>"
        iss = make_issue(1, body, resolution='<iref ref="999"/>')
        with pytest.raises(UnresolvedIrefError):
            transform_issue(iss, [iss], make_index())
        assert iss.body_text == body


class TestPrepareIssues:
    def test_sorts_and_transforms(self) -> None:
        issues = [
            make_issue(20, '<discussion>See <iref ref="10"/>.</discussion>'),
            make_issue(10, "<discussion>First.</discussion>"),
        ]
        failures = prepare_issues(issues, make_index())
        assert failures == []
        assert [i.number for i in issues] == [10, 20]
        assert issues[1].body_text == (
            '<p><b>Discussion:</b></p>See <a href="lwg-active.html#10">10</a>.'
        )

    def test_duplicate_numbers(self) -> None:
        issues = [make_issue(5, ""), make_issue(5, "")]
        with pytest.raises(DuplicateIssueError, match="5"):
            prepare_issues(issues, make_index())

    def test_raises_first_failure(self) -> None:
        issues = [make_issue(1, "<discussion>broken</note>")]
        with pytest.raises(MismatchedTagError):
            prepare_issues(issues, make_index())

    def test_skip_errors_publishes_escaped_source(self) -> None:
        issues = [
            make_issue(1, "<discussion>fine</discussion>"),
            make_issue(2, '<iref ref="1"/> <note unterminated', resolution='<iref ref="1"/>'),
        ]
        failures = prepare_issues(issues, make_index(), skip_errors=True)
        assert len(failures) == 1
        assert isinstance(failures[0], UnterminatedTagError)
        assert issues[0].body_text == "<p><b>Discussion:</b></p>fine"
        body = issues[1].body_text
        assert body.startswith('<p><font color="red"><b>Markup error:</b> ')
        assert "in issue 2" in body
        assert "&lt;note unterminated" in body
        assert "&lt;iref ref=&quot;1&quot;/&gt;" in body
        assert "<note" not in body
        assert issues[1].resolution_text == ""
