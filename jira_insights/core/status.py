"""Status normalization and categorization utilities.

Jira reports every status with a ``statusCategory`` whose ``key`` is one of
``new``, ``indeterminate`` or ``done``. Reports work on those three
categories rather than on workflow-specific status names, which differ
between projects.
"""

from __future__ import annotations

from typing import Any

from .config import UNKNOWN
from .models import IssueStatus, StatusCategory

CATEGORY_KEYS: dict[str, StatusCategory] = {
    "new": StatusCategory.TODO,
    "indeterminate": StatusCategory.IN_PROGRESS,
    "done": StatusCategory.DONE,
}

# Fallback when the payload carries a status name but no category block
STATUS_NAME_CATEGORIES: dict[str, StatusCategory] = {
    "open": StatusCategory.TODO,
    "to do": StatusCategory.TODO,
    "backlog": StatusCategory.TODO,
    "new": StatusCategory.TODO,
    "in progress": StatusCategory.IN_PROGRESS,
    "in review": StatusCategory.IN_PROGRESS,
    "blocked": StatusCategory.IN_PROGRESS,
    "waiting for support": StatusCategory.IN_PROGRESS,
    "waiting for customer": StatusCategory.IN_PROGRESS,
    "done": StatusCategory.DONE,
    "closed": StatusCategory.DONE,
    "resolved": StatusCategory.DONE,
    "canceled": StatusCategory.DONE,
    "cancelled": StatusCategory.DONE,
}


def clean_status_name(value: str | None) -> str:
    """Sanitize status string, converting null-like values to "Unknown".

    Parameters
    ----------
    value : str | None
        Raw status string.

    Returns
    -------
    str
        Cleaned status string or "Unknown" for empty/null values.
    """
    if not value:
        return UNKNOWN
    text = str(value).strip()
    if not text:
        return UNKNOWN
    if text.lower() in {"nan", "none", "null"}:
        return UNKNOWN
    return text


def map_status_category(category_key: str | None, status_name: str | None = None) -> StatusCategory:
    """Map a Jira status category key to a :class:`StatusCategory`.

    Falls back to well-known status names when the key is missing, and to
    ``StatusCategory.UNKNOWN`` when neither identifies the category.
    """
    if category_key:
        category = CATEGORY_KEYS.get(str(category_key).strip().lower())
        if category is not None:
            return category
    if status_name:
        return STATUS_NAME_CATEGORIES.get(str(status_name).strip().lower(), StatusCategory.UNKNOWN)
    return StatusCategory.UNKNOWN


def parse_status(raw: Any) -> IssueStatus:
    """Build an :class:`IssueStatus` from the raw ``fields.status`` block."""
    if not isinstance(raw, dict):
        return IssueStatus()
    name = clean_status_name(raw.get("name"))
    category_block = raw.get("statusCategory") or {}
    key = category_block.get("key") if isinstance(category_block, dict) else None
    return IssueStatus(name=name, category=map_status_category(key, name))


def is_in_progress_name(status_name: str | None) -> bool:
    """Loose name check used where only the status name is available."""
    return "progress" in str(status_name or "").lower()
