"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import jira_insights` works.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jira_insights.core.models import IssueRecord, IssueStatus, StatusCategory  # noqa: E402

_CATEGORY_BY_STATUS = {
    "To Do": StatusCategory.TODO,
    "Open": StatusCategory.TODO,
    "In Progress": StatusCategory.IN_PROGRESS,
    "Done": StatusCategory.DONE,
    "Closed": StatusCategory.DONE,
    "Resolved": StatusCategory.DONE,
    "Canceled": StatusCategory.DONE,
}


@pytest.fixture
def make_issue():
    """Factory for IssueRecord with sensible defaults and status name shortcuts."""

    def _make(key: str = "DEV-1", status: str = "To Do", **kwargs) -> IssueRecord:
        if "project_key" not in kwargs:
            kwargs["project_key"] = key.split("-", 1)[0]
        return IssueRecord(
            key=key,
            status=IssueStatus(status, _CATEGORY_BY_STATUS.get(status, StatusCategory.UNKNOWN)),
            **kwargs,
        )

    return _make
