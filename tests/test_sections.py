"""Tests for issuelist.sections locators and the section index."""
from __future__ import annotations

import pytest

from issuelist.errors import SectionFormatError
from issuelist.sections import (
    UNKNOWN_SECTION,
    SectionIndex,
    SectionLocator,
    format_section_locator,
    major_section,
    parse_section_locator,
    read_section_index,
    remove_square_brackets,
)


class TestParseSectionLocator:
    def test_numeric_path(self) -> None:
        assert parse_section_locator("23.3.6") == SectionLocator("", (23, 3, 6))

    def test_letter_component(self) -> None:
        assert parse_section_locator("D.12") == SectionLocator("", (103, 12))

    def test_tr_prefix(self) -> None:
        assert parse_section_locator("TR1 2.1") == SectionLocator("TR1", (2, 1))
        assert parse_section_locator("TRDecimal 3.2") == SectionLocator("TRDecimal", (3, 2))

    @pytest.mark.parametrize("text", ["", "   ", "23..1", "23.x", "TR2 1.1", "TR1", "123.1", "AB.1"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(SectionFormatError):
            parse_section_locator(text)

    @pytest.mark.parametrize("text", ["1", "23.3.6", "D.12", "TR1 2.1", "TRDecimal 3.2", "Z.99"])
    def test_format_inverts_parse(self, text: str) -> None:
        loc = parse_section_locator(text)
        assert format_section_locator(loc) == text
        assert parse_section_locator(format_section_locator(loc)) == loc


class TestOrdering:
    def test_componentwise(self) -> None:
        assert parse_section_locator("23.2") < parse_section_locator("23.10")
        assert parse_section_locator("23") < parse_section_locator("23.1")

    def test_prefix_first(self) -> None:
        assert parse_section_locator("30.1") < parse_section_locator("TR1 1.1")

    def test_annexes_after_numbers(self) -> None:
        assert parse_section_locator("99.1") < parse_section_locator("A.1")

    def test_unknown_after_main_document(self) -> None:
        assert parse_section_locator("Z.99.99") < UNKNOWN_SECTION
        assert format_section_locator(UNKNOWN_SECTION) == "?"

    def test_unknown_before_prefixed_documents(self) -> None:
        # The placeholder has no prefix, and prefixes compare first.
        assert UNKNOWN_SECTION < SectionLocator("TR1", (2, 1))
        assert UNKNOWN_SECTION < parse_section_locator("TRDecimal 1")

    def test_empty_components_rejected(self) -> None:
        with pytest.raises(ValueError, match="components cannot be empty"):
            SectionLocator("", ())


class TestHelpers:
    def test_major_section(self) -> None:
        assert major_section(parse_section_locator("23.3.6")) == "23"
        assert major_section(parse_section_locator("D.12")) == "D"
        assert major_section(parse_section_locator("TR1 2.1")) == "TR1 2"

    def test_remove_square_brackets(self) -> None:
        assert remove_square_brackets("[vector]") == "vector"
        with pytest.raises(SectionFormatError):
            remove_square_brackets("vector")


class TestSectionIndex:
    def test_register_never_overwrites(self) -> None:
        index = SectionIndex()
        assert index.register("[vector]", SectionLocator("", (23, 3, 6)))
        assert not index.register("[vector]", SectionLocator("", (1,)))
        assert index["[vector]"] == SectionLocator("", (23, 3, 6))

    def test_unknown_registered_once(self) -> None:
        index = SectionIndex()
        assert index.register_unknown("[nowhere]")
        assert not index.register_unknown("[nowhere]")
        assert index["[nowhere]"] == UNKNOWN_SECTION
        assert index.unknown_tags == frozenset({"[nowhere]"})
        assert len(index) == 1

    def test_register_unknown_keeps_known(self) -> None:
        index = SectionIndex({"[vector]": SectionLocator("", (23, 3, 6))})
        assert not index.register_unknown("[vector]")
        assert index.unknown_tags == frozenset()

    def test_format_tag(self) -> None:
        index = SectionIndex({"[vector]": SectionLocator("", (23, 3, 6))})
        assert index.format_tag("[vector]") == "23.3.6 [vector]"
        assert index.format_tag("[missing]") == "? [missing]"
        assert "[missing]" in index


class TestReadSectionIndex:
    def test_reads_lines(self) -> None:
        text = (
            "23.3.6 [vector]\n"
            "\n"
            "D.12 [depr.ios.members]\n"
            "TR1 2.1 [tr.util]\n"
            "3.2 [trdec.types]\n"
        )
        index = read_section_index(text)
        assert index["[vector]"] == SectionLocator("", (23, 3, 6))
        assert index["[depr.ios.members]"] == SectionLocator("", (103, 12))
        assert index["[tr.util]"] == SectionLocator("TR1", (2, 1))
        assert index["[trdec.types]"] == SectionLocator("TRDecimal", (3, 2))
        assert len(index) == 4

    def test_first_line_wins(self) -> None:
        index = read_section_index("1.1 [intro]\n2.2 [intro]\n")
        assert index["[intro]"] == SectionLocator("", (1, 1))

    def test_error_names_line(self) -> None:
        with pytest.raises(SectionFormatError, match="line 2"):
            read_section_index("1.1 [intro]\n1.x [bad]\n")

    def test_missing_tag(self) -> None:
        with pytest.raises(SectionFormatError, match="missing \\[tag\\]"):
            read_section_index("1.1 intro\n")
