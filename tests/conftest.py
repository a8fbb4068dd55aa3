"""Shared fixtures: a small issues repository on disk."""
from __future__ import annotations

from pathlib import Path

import pytest

SECTION_DATA = """\
1 [intro]
23.3.6 [vector]
23.3.5 [list]
TR1 2.1 [tr.util]
"""

CONFIG_XML = """<?xml version="1.0" encoding="utf-8"?>
<config>
<issuelist revision="R92" date="2015-05-22" title="Post-Lenexa mailing"
  active_docno="N4480" defect_docno="N4481" closed_docno="N4482"
  doc_name="C++ Standard Library" doc_reference="ISO/IEC IS 14882:2014(E)"
  file_name_prefix="lwg-" maintainer="Jane Doe &lt;jane@example.org&gt;"/>
<intro list="Active"><p>Active intro for <replace "revision"/>.</p></intro>
<intro list="Defects"><p>Defect intro.</p></intro>
<intro list="Closed"><p>Closed intro.</p></intro>
<statuses><p>Status legend.</p></statuses>
<revision_history>
<revision tag="R91">Pre-Lenexa mailing.</revision>
</revision_history>
</config>
"""

OLD_TOC = """<html><body>
<table>
<tr><td><a href="lwg-toc.html">Issue</a></td><td><a href="lwg-status-index.html">Status</a></td></tr>
<tr><td><a href="#10">10</a></td><td><a href="lwg-active.html#Open">Open</a></td></tr>
<tr><td><a href="#20">20</a></td><td><a href="lwg-active.html#New">New</a></td></tr>
</table>
</body></html>
"""

ISSUE_TEMPLATE = """<?xml version='1.0' encoding='utf-8' standalone='no'?>
<issue num="{num}" status="{status}">
<title>{title}</title>
<section><sref ref="{tag}"/></section>
<submitter>Jane Doe</submitter>
<date>14 Mar 2015</date>
<priority>{priority}</priority>

<discussion>
{discussion}
</discussion>

<resolution>
{resolution}
</resolution>
</issue>
"""


def issue_xml(
    num: int,
    status: str,
    *,
    title: str | None = None,
    tag: str = "[vector]",
    priority: int = 2,
    discussion: str = "<p>Some discussion.</p>",
    resolution: str = "<p>Change the wording of the paragraph.</p>",
) -> str:
    return ISSUE_TEMPLATE.format(
        num=num,
        status=status,
        title=title or f"Issue number {num}",
        tag=tag,
        priority=priority,
        discussion=discussion,
        resolution=resolution,
    )


@pytest.fixture
def issues_repo(tmp_path: Path) -> Path:
    """Issues 10 (Ready, was Open), 20 (New, duplicate of 10), 30 (WP, added)."""
    root = tmp_path / "lwg"
    (root / "meta-data").mkdir(parents=True)
    (root / "xml").mkdir()
    (root / "meta-data" / "section.data").write_text(SECTION_DATA, encoding="utf-8")
    (root / "meta-data" / "lwg-old-toc.html").write_text(OLD_TOC, encoding="utf-8")
    (root / "xml" / "config.xml").write_text(CONFIG_XML, encoding="utf-8")
    (root / "xml" / "issue10.xml").write_text(
        issue_xml(10, "Ready", discussion='<p>See <sref ref="[list]"/>.</p>'),
        encoding="utf-8",
    )
    (root / "xml" / "issue20.xml").write_text(
        issue_xml(
            20,
            "New",
            tag="[unknown.tag]",
            discussion='<p>Same as the other.</p>\n<duplicate><iref ref="10"/></duplicate>',
        ),
        encoding="utf-8",
    )
    (root / "xml" / "issue30.xml").write_text(
        issue_xml(30, "WP", tag="[tr.util]", priority=99),
        encoding="utf-8",
    )
    return root
