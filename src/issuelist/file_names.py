"""Names of the published documents, all sharing one configurable prefix."""
from __future__ import annotations

from dataclasses import dataclass

from issuelist.status import PublicationCategory, publication_category

DEFAULT_PREFIX = "lwg-"


@dataclass(frozen=True, slots=True)
class FileNames:
    """Output file names for one mailing (e.g. prefix ``"lwg-"``)."""

    prefix: str = DEFAULT_PREFIX

    @property
    def active(self) -> str:
        return f"{self.prefix}active.html"

    @property
    def closed(self) -> str:
        return f"{self.prefix}closed.html"

    @property
    def defects(self) -> str:
        return f"{self.prefix}defects.html"

    @property
    def toc(self) -> str:
        return f"{self.prefix}toc.html"

    @property
    def old_toc(self) -> str:
        return f"{self.prefix}old-toc.html"

    @property
    def status_index(self) -> str:
        # not "index.html", to avoid clashing with a site index
        return f"{self.prefix}status-index.html"

    @property
    def status_date_index(self) -> str:
        return f"{self.prefix}status-date-index.html"

    @property
    def section_index(self) -> str:
        return f"{self.prefix}section-index.html"

    @property
    def unresolved_toc(self) -> str:
        return f"{self.prefix}unresolved-toc.html"

    @property
    def unresolved_status_index(self) -> str:
        return f"{self.prefix}unresolved-status-index.html"

    @property
    def unresolved_status_date_index(self) -> str:
        return f"{self.prefix}unresolved-status-date-index.html"

    @property
    def unresolved_section_index(self) -> str:
        return f"{self.prefix}unresolved-section-index.html"

    @property
    def unresolved_prioritized_index(self) -> str:
        return f"{self.prefix}unresolved-prioritized-index.html"

    @property
    def votable_toc(self) -> str:
        return f"{self.prefix}votable-toc.html"

    @property
    def votable_status_index(self) -> str:
        return f"{self.prefix}votable-status-index.html"

    @property
    def votable_status_date_index(self) -> str:
        return f"{self.prefix}votable-status-date-index.html"

    @property
    def votable_section_index(self) -> str:
        return f"{self.prefix}votable-section-index.html"

    @property
    def open_index(self) -> str:
        return f"{self.prefix}open-index.html"

    @property
    def tentative(self) -> str:
        return f"{self.prefix}tentative.html"

    @property
    def unresolved(self) -> str:
        return f"{self.prefix}unresolved.html"

    @property
    def immediate(self) -> str:
        return f"{self.prefix}immediate.html"

    def for_category(self, category: PublicationCategory) -> str:
        if category == "Active":
            return self.active
        if category == "Defect":
            return self.defects
        return self.closed

    def filename_for_status(self, status: str) -> str:
        """Document an issue with *status* is published in."""
        return self.for_category(publication_category(status))
