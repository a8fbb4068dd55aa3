"""Status taxonomy for committee issues.

Relates a free-form status label to the published document it belongs in
(its publication category) and to its position in the manual ordering used
by every "sort by status" document.

Two qualifiers may prefix a canonical status:
    "Tentatively <status>" -- always published as Active.
    "Pending <status>"     -- classified as the underlying status.

``publication_category`` fails on an unknown label so that it cannot be
misfiled; ``priority_rank`` instead sorts unknown labels last. Both
behaviours are intentional.
"""
from __future__ import annotations

from typing import Literal, TypeAlias

from issuelist.errors import UnknownStatusError

PublicationCategory: TypeAlias = Literal["Active", "Defect", "Closed"]

_TENTATIVELY = "Tentatively"
_PENDING = "Pending"


# ---------------------------------------------------------------------------
# Fixed tables
# ---------------------------------------------------------------------------

_CATEGORY_BY_STATUS: dict[str, PublicationCategory] = {
    "TC1": "Defect",
    "CD1": "Defect",
    "C++11": "Defect",
    "C++14": "Defect",
    "WP": "Defect",
    "Resolved": "Defect",
    "DR": "Defect",
    "TRDec": "Defect",
    "Dup": "Closed",
    "NAD": "Closed",
    "NAD Future": "Closed",
    "NAD Editorial": "Closed",
    "NAD Concepts": "Closed",
    "Voting": "Active",
    "Immediate": "Active",
    "Ready": "Active",
    "Review": "Active",
    "New": "Active",
    "Open": "Active",
    "EWG": "Active",
    "LEWG": "Active",
    "Core": "Active",
    "Deferred": "Active",
}

# Manually ordered: the order issues appear in status-sorted documents.
STATUS_PRIORITY: tuple[str, ...] = (
    "Voting",
    "Tentatively Voting",
    "Immediate",
    "Ready",
    "Tentatively Ready",
    "Tentatively NAD Editorial",
    "Tentatively NAD Future",
    "Tentatively NAD",
    "Review",
    "New",
    "Open",
    "LEWG",
    "EWG",
    "Core",
    "Deferred",
    "Tentatively Resolved",
    "Pending DR",
    "Pending WP",
    "Pending Resolved",
    "Pending NAD Future",
    "Pending NAD Editorial",
    "Pending NAD",
    "NAD Future",
    "DR",
    "WP",
    "C++14",
    "C++11",
    "CD1",
    "TC1",
    "Resolved",
    "TRDec",
    "NAD Editorial",
    "NAD",
    "Dup",
    "NAD Concepts",
)

_RANK_BY_STATUS: dict[str, int] = {s: i for i, s in enumerate(STATUS_PRIORITY)}

_NOT_RESOLVED: frozenset[str] = frozenset(
    {"Core", "Deferred", "EWG", "New", "Open", "Review"}
)
_VOTABLE: frozenset[str] = frozenset({"Immediate", "Voting"})


# ---------------------------------------------------------------------------
# Qualifier stripping
# ---------------------------------------------------------------------------


def remove_pending(status: str) -> str:
    """Strip a leading "Pending " qualifier."""
    if status.startswith(_PENDING):
        return status[len(_PENDING) + 1:]
    return status


def remove_tentatively(status: str) -> str:
    """Strip a leading "Tentatively " qualifier."""
    if status.startswith(_TENTATIVELY):
        return status[len(_TENTATIVELY) + 1:]
    return status


def remove_qualifier(status: str) -> str:
    """Strip "Pending" then "Tentatively", yielding the canonical label."""
    return remove_tentatively(remove_pending(status))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def publication_category(status: str) -> PublicationCategory:
    """Return the document an issue with *status* is published in.

    Raises:
        UnknownStatusError: the qualifier-stripped label is not in the table.
    """
    if status.startswith(_TENTATIVELY):
        return "Active"
    canonical = remove_qualifier(status)
    category = _CATEGORY_BY_STATUS.get(canonical)
    if category is None:
        raise UnknownStatusError(canonical)
    return category


def is_active(status: str) -> bool:
    return publication_category(status) == "Active"


def is_defect(status: str) -> bool:
    return publication_category(status) == "Defect"


def is_closed(status: str) -> bool:
    return publication_category(status) == "Closed"


def is_active_not_ready(status: str) -> bool:
    return is_active(status) and status != "Ready"


def is_tentative(status: str) -> bool:
    return status.startswith(_TENTATIVELY)


def is_not_resolved(status: str) -> bool:
    """True for statuses still awaiting review (no qualifier stripping)."""
    return status in _NOT_RESOLVED


def is_votable(status: str) -> bool:
    return remove_tentatively(status) in _VOTABLE


def is_ready(status: str) -> bool:
    return remove_tentatively(status) == "Ready"


def priority_rank(status: str) -> int:
    """Position of *status* in the manual ordering; unknown labels sort last."""
    return _RANK_BY_STATUS.get(status, len(STATUS_PRIORITY))
