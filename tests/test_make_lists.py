"""End-to-end tests for scripts/make_lists.py."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from issuelist.errors import MismatchedTagError
from issuelist.run_manifest import load_manifest
from scripts.make_lists import main, run_publish

EXPECTED_DOCUMENTS = {
    "lwg-active.html",
    "lwg-defects.html",
    "lwg-closed.html",
    "lwg-tentative.html",
    "lwg-unresolved.html",
    "lwg-immediate.html",
    "lwg-toc.html",
    "lwg-status-index.html",
    "lwg-status-date-index.html",
    "lwg-section-index.html",
    "lwg-open-index.html",
    "lwg-unresolved-toc.html",
    "lwg-unresolved-status-index.html",
    "lwg-unresolved-status-date-index.html",
    "lwg-unresolved-section-index.html",
    "lwg-unresolved-prioritized-index.html",
    "lwg-votable-toc.html",
    "lwg-votable-status-index.html",
    "lwg-votable-status-date-index.html",
    "lwg-votable-section-index.html",
}


class TestRunPublish:
    def test_writes_every_document(self, issues_repo: Path) -> None:
        manifest = run_publish(issues_repo)
        mailing = issues_repo / "mailing"
        assert set(manifest["documents"]) == EXPECTED_DOCUMENTS
        for name in EXPECTED_DOCUMENTS:
            assert (mailing / name).exists()
        assert manifest["issue_counts"] == {"Active": 2, "Defect": 1, "Closed": 0}
        assert manifest["errors_count"] == 0
        assert manifest["unknown_section_tags"] == ["[unknown.tag]"]
        assert manifest["revision"] == "R92"

    def test_manifest_written(self, issues_repo: Path) -> None:
        manifest = run_publish(issues_repo)
        loaded = load_manifest(issues_repo / "mailing" / "run_manifest.json")
        assert loaded["run_id"] == manifest["run_id"]
        assert (issues_repo / "mailing" / f"run_manifest_{manifest['run_id']}.json").exists()

    def test_revision_report(self, issues_repo: Path) -> None:
        run_publish(issues_repo)
        active = (issues_repo / "mailing" / "lwg-active.html").read_text(encoding="utf-8")
        assert "<li>2 open issues, up by 0.</li>" in active
        assert "<li>1 closed issues, up by 1.</li>" in active
        assert 'Added the following WP issue: <a href="lwg-defects.html#30">30</a>.' in active
        assert (
            'Changed the following issue to Ready (from Open): '
            '<a href="lwg-active.html#10">10</a>.'
        ) in active
        assert "<p>Active intro for R92.</p>" in active

    def test_markup_and_duplicates(self, issues_repo: Path) -> None:
        run_publish(issues_repo)
        active = (issues_repo / "mailing" / "lwg-active.html").read_text(encoding="utf-8")
        assert "<p><b>Discussion:</b></p>" in active
        assert "<p>See 23.3.5 [list].</p>" in active
        assert '<p><b>Duplicate of:</b> <a href="lwg-active.html#20">20</a></p>' in active
        assert '<p><b>Duplicate of:</b> <a href="lwg-active.html#10">10</a></p>' in active
        assert "<duplicate>" not in active
        assert "? [unknown.tag]" in active

    def test_toc_becomes_next_snapshot(self, issues_repo: Path) -> None:
        run_publish(issues_repo)
        toc = issues_repo / "mailing" / "lwg-toc.html"
        (issues_repo / "meta-data" / "lwg-old-toc.html").write_text(
            toc.read_text(encoding="utf-8"), encoding="utf-8"
        )
        manifest = run_publish(issues_repo)
        assert manifest["notes"]["diff"]["added"] == []
        assert manifest["notes"]["diff"]["changed"] == []
        assert manifest["compared_to_previous"]["issue_count_delta"] == {
            "Active": 0, "Closed": 0, "Defect": 0,
        }

    def test_bad_markup_aborts(self, issues_repo: Path) -> None:
        path = issues_repo / "xml" / "issue30.xml"
        path.write_text(
            path.read_text(encoding="utf-8").replace("<p>Some discussion.</p>", "<p>Broken</note>"),
            encoding="utf-8",
        )
        with pytest.raises(MismatchedTagError, match="issue 30"):
            run_publish(issues_repo)

    def test_bad_markup_skipped(self, issues_repo: Path) -> None:
        path = issues_repo / "xml" / "issue30.xml"
        path.write_text(
            path.read_text(encoding="utf-8").replace("<p>Some discussion.</p>", "<p>Broken</note>"),
            encoding="utf-8",
        )
        manifest = run_publish(issues_repo, skip_errors=True)
        assert manifest["errors_count"] == 1
        assert "issue 30" in manifest["notes"]["errors"][0]
        defects = (issues_repo / "mailing" / "lwg-defects.html").read_text(encoding="utf-8")
        assert "<b>Markup error:</b>" in defects
        assert "&lt;p&gt;Broken&lt;/note&gt;" in defects
        assert "<p>Broken</note>" not in defects


class TestReadyRouting:
    def test_ready_listed_as_votable_between_meetings(self, issues_repo: Path) -> None:
        run_publish(issues_repo)
        mailing = issues_repo / "mailing"
        votable = (mailing / "lwg-votable-toc.html").read_text(encoding="utf-8")
        unresolved = (mailing / "lwg-unresolved-toc.html").read_text(encoding="utf-8")
        assert '<a href="#10">10</a>' in votable
        assert '<a href="#10">10</a>' not in unresolved
        assert '<a href="#20">20</a>' in unresolved

    def test_ready_stays_unresolved_during_meeting(self, issues_repo: Path) -> None:
        path = issues_repo / "xml" / "issue30.xml"
        path.write_text(
            path.read_text(encoding="utf-8").replace('status="WP"', 'status="Voting"'),
            encoding="utf-8",
        )
        run_publish(issues_repo)
        mailing = issues_repo / "mailing"
        votable = (mailing / "lwg-votable-toc.html").read_text(encoding="utf-8")
        unresolved = (mailing / "lwg-unresolved-toc.html").read_text(encoding="utf-8")
        assert '<a href="#30">30</a>' in votable
        assert '<a href="#10">10</a>' not in votable
        assert '<a href="#10">10</a>' in unresolved


class TestMain:
    def test_prints_summary(self, issues_repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main([str(issues_repo)])
        summary = json.loads(capsys.readouterr().out)
        assert summary["documents"] == len(EXPECTED_DOCUMENTS)
        assert summary["issue_counts"]["Defect"] == 1

    def test_error_exit_code(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path)])
        assert excinfo.value.code == 1

    def test_usage_exit_code(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["--no-such-flag"])
        assert excinfo.value.code == 2
