"""Shared match-status definitions and helpers.

Match status is stored as free-form text, so unknown values are kept as-is.
This module names the statuses the rest of the system knows about and the
groups they belong to.
"""

from __future__ import annotations

from typing import Optional

DEFAULT_MATCH_STATUS = "scheduled"

# Individual statuses currently used in the system.
ALL_MATCH_STATUSES: tuple[str, ...] = (
    "scheduled",
    "in_progress",
    "finished",
    "cancelled",
    "postponed",
)

# Canonical status groups.
MATCH_STATUS_GROUPS: dict[str, tuple[str, ...]] = {
    # Matches still awaiting a result.
    "pending": ("scheduled", "postponed"),
    # Matches that will not change score any more.
    "terminal": ("finished", "cancelled"),
    "all": ALL_MATCH_STATUSES,
}


def get_status_group(group_name: str) -> tuple[str, ...]:
    """Return a named status group, raising KeyError for unknown names."""
    return MATCH_STATUS_GROUPS[group_name]


def normalize_status(raw: Optional[str]) -> Optional[str]:
    """Trim and lower-case a status; blank input becomes None."""
    if raw is None:
        return None
    status = raw.strip().lower()
    return status or None


def is_known_status(status: Optional[str]) -> bool:
    return normalize_status(status) in ALL_MATCH_STATUSES
