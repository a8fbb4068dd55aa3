"""Tests for scripts/set_status.py."""
from __future__ import annotations

from pathlib import Path

import pytest

from issuelist.errors import IssueNumberMismatchError
from scripts.set_status import main, set_issue_status


class TestSetIssueStatus:
    def test_underscores_become_spaces(self, issues_repo: Path) -> None:
        path = set_issue_status(issues_repo, 20, "Tentatively_NAD")
        text = path.read_text(encoding="utf-8")
        assert '<issue num="20" status="Tentatively NAD">' in text
        assert "<title>Issue number 20</title>" in text

    def test_number_mismatch(self, issues_repo: Path) -> None:
        other = issues_repo / "xml" / "issue10.xml"
        (issues_repo / "xml" / "issue11.xml").write_text(
            other.read_text(encoding="utf-8"), encoding="utf-8"
        )
        with pytest.raises(IssueNumberMismatchError):
            set_issue_status(issues_repo, 11, "WP")


class TestMain:
    def test_updates_file(self, issues_repo: Path) -> None:
        main(["30", "C++14", "--path", str(issues_repo)])
        text = (issues_repo / "xml" / "issue30.xml").read_text(encoding="utf-8")
        assert 'status="C++14"' in text

    def test_missing_issue(self, issues_repo: Path) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["999", "WP", "--path", str(issues_repo)])
        assert excinfo.value.code == 1

    def test_bad_number(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["abc", "WP"])
        assert excinfo.value.code == 2
