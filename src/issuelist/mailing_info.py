"""Mailing configuration store (config.xml).

config.xml is a flat bag of ``name="value"`` attributes plus a few text
blocks (introductions, statuses, revision history). It is treated as text,
not parsed as XML: an attribute is the first ``name="..."`` anywhere in the
file, whichever element holds it.

On load, every ``<replace "name"/>`` directive is substituted with the value
of attribute ``name``.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from issuelist.errors import ConfigError, MalformedIrefError, UnresolvedIrefError
from issuelist.file_names import FileNames
from issuelist.io_utils import read_text
from issuelist.issue_types import IssueRecord, find_issue_index, make_html_anchor

log = logging.getLogger(__name__)

_REPLACE_START = '<replace "'
_REPLACE_END = '"/>'
_IREF_START = '<iref ref="'

_DOC_NUMBER_ATTRIBUTES: dict[str, str] = {
    "active": "active_docno",
    "defect": "defect_docno",
    "closed": "closed_docno",
}

_INTRO_LISTS: dict[str, str] = {
    "active": "Active",
    "defect": "Defects",
    "closed": "Closed",
}


def replace_all_irefs(
    issues: Sequence[IssueRecord],
    text: str,
    names: FileNames | None = None,
) -> str:
    """Replace every ``<iref ref="N"/>`` in *text* with an anchor to issue N.

    *issues* must be sorted by number. Errors are reported against issue 0,
    since the text belongs to no issue.
    """
    out: list[str] = []
    pos = 0
    while True:
        i = text.find(_IREF_START, pos)
        if i < 0:
            out.append(text[pos:])
            break
        j = text.find(">", i)
        if j < 0:
            raise MalformedIrefError(0, "missing '>' after iref")
        k = i + len(_IREF_START)
        close = text.find('"', k)
        if close < 0 or close >= j:
            raise MalformedIrefError(0, "missing '\"' in iref")
        value = text[k:close].strip()
        if not value.isdigit():
            raise MalformedIrefError(0, f"bad number {value!r} in iref")
        idx = find_issue_index(issues, int(value))
        if idx is None:
            raise UnresolvedIrefError(0, int(value))
        out.append(text[pos:i])
        out.append(make_html_anchor(issues[idx], names))
        pos = j + 1
    return "".join(out)


class MailingInfo:
    """Read-only view over config.xml text."""

    def __init__(self, text: str) -> None:
        self._data = self._expand_replacements(text)

    def _expand_replacements(self, text: str) -> str:
        pos = 0
        while True:
            first = text.find(_REPLACE_START, pos)
            if first < 0:
                return text
            last = text.find(_REPLACE_END, first + len(_REPLACE_START))
            if last < 0:
                raise ConfigError(
                    f"error in config.xml: failed to find close for: {text[first:first + 32]}..."
                )
            name = text[first + len(_REPLACE_START):last]
            value = self._attribute_in(text, name)
            log.debug("config replace %s -> %s", name, value)
            text = text[:first] + value + text[last + len(_REPLACE_END):]
            pos = first + len(value)

    @staticmethod
    def _attribute_in(text: str, name: str) -> str:
        search = f'{name}="'
        i = text.find(search)
        if i < 0:
            raise ConfigError(f"Unable to find {name} in config.xml")
        i += len(search)
        j = text.find('"', i)
        if j < 0:
            raise ConfigError(f"Unable to parse {name} in config.xml")
        return text[i:j]

    def _block(self, start_marker: str, end_marker: str, what: str) -> str:
        i = self._data.find(start_marker)
        if i < 0:
            raise ConfigError(f"Unable to find {what} in config.xml")
        i += len(start_marker)
        j = self._data.find(end_marker, i)
        if j < 0:
            raise ConfigError(f"Unable to parse {what} in config.xml")
        return self._data[i:j]

    def get_attribute(self, name: str) -> str:
        return self._attribute_in(self._data, name)

    def get_doc_number(self, doc: str) -> str:
        attribute = _DOC_NUMBER_ATTRIBUTES.get(doc)
        if attribute is None:
            raise ConfigError(f"unknown argument to get_doc_number: {doc}")
        return self.get_attribute(attribute)

    def get_intro(self, doc: str) -> str:
        list_name = _INTRO_LISTS.get(doc)
        if list_name is None:
            raise ConfigError(f"unknown argument to intro: {doc}")
        return self._block(f'<intro list="{list_name}">', "</intro>", "intro")

    def get_doc_name(self) -> str:
        return self.get_attribute("doc_name")

    def get_doc_reference(self) -> str:
        return self.get_attribute("doc_reference")

    def get_file_name_prefix(self) -> str:
        return self.get_attribute("file_name_prefix")

    def get_revision(self) -> str:
        return self.get_attribute("revision")

    def get_maintainer(self) -> str:
        """Maintainer name with the ``&lt;email&gt;`` part turned into a mailto link."""
        value = self.get_attribute("maintainer")
        m = value.find("&lt;")
        if m < 0:
            raise ConfigError("Unable to parse maintainer email address in config.xml")
        m += len("&lt;")
        me = value.find("&gt;", m)
        if me < 0:
            raise ConfigError("Unable to parse maintainer email address in config.xml")
        email = value[m:me]
        return f'{value[:m]}<a href="mailto:{email}">{email}</a>{value[me:]}'

    def get_statuses(self) -> str:
        return self._block("<statuses>", "</statuses>", "statuses")

    def get_revisions(
        self,
        issues: Sequence[IssueRecord],
        diff_report: str,
        names: FileNames | None = None,
    ) -> str:
        """Revision-history list: this revision (with *diff_report*), then history.

        *issues* must be sorted by number; every iref in the result is
        resolved against it.
        """
        history = self._block("<revision_history>", "</revision_history>", "<revision_history>")

        parts: list[str] = ["<ul>\n"]
        parts.append(
            f"<li>{self.get_revision()}: {self.get_attribute('date')} "
            f"{self.get_attribute('title')}{diff_report}</li>\n"
        )

        marker = '<revision tag="'
        pos = 0
        while True:
            i = history.find(marker, pos)
            if i < 0:
                break
            i += len(marker)
            j = history.find('"', i)
            if j < 0:
                raise ConfigError("Unable to parse revision tag in config.xml")
            tag = history[i:j]
            body_start = history.find(">", j) + 1
            end = history.find("</revision>", body_start)
            if body_start <= 0 or end < 0:
                raise ConfigError(f"Unable to parse revision {tag} in config.xml")
            parts.append(f"<li>{tag}: {history[body_start:end]}</li>\n")
            pos = end

        parts.append("</ul>\n")
        return replace_all_irefs(issues, "".join(parts), names)


def load_mailing_info(path: Path) -> MailingInfo:
    log.info("Reading configuration from %s", path)
    return MailingInfo(read_text(path))
