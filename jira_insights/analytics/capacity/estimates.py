"""Explicit and default ("guessed") hour estimates for open work."""

from __future__ import annotations

from dataclasses import dataclass

from jira_insights.core.config import (
    DEFAULT_IN_PROGRESS_ESTIMATE_HOURS,
    DEFAULT_TODO_ESTIMATE_HOURS,
    ESTIMATE_QUALIFYING_PROJECTS,
    ESTIMATE_QUALIFYING_TYPES,
    SECONDS_PER_HOUR,
)
from jira_insights.core.models import IssueRecord, StatusCategory


@dataclass(slots=True, frozen=True)
class EstimateRules:
    qualifying_projects: frozenset[str] = ESTIMATE_QUALIFYING_PROJECTS
    qualifying_types: frozenset[str] = ESTIMATE_QUALIFYING_TYPES
    todo_hours: float = DEFAULT_TODO_ESTIMATE_HOURS
    in_progress_hours: float = DEFAULT_IN_PROGRESS_ESTIMATE_HOURS

    def qualifies(self, issue: IssueRecord) -> bool:
        return issue.project_key in self.qualifying_projects or issue.issue_type in self.qualifying_types


DEFAULT_ESTIMATE_RULES = EstimateRules()


def explicit_hours(issue: IssueRecord) -> float:
    """Original estimate in hours, 0 when the issue carries none."""
    if issue.original_estimate_seconds is None:
        return 0.0
    return issue.original_estimate_seconds / SECONDS_PER_HOUR


def default_hours(issue: IssueRecord, rules: EstimateRules = DEFAULT_ESTIMATE_RULES) -> float:
    """Guessed hours for an issue without an original estimate.

    Applies only to issues in a qualifying project or of a qualifying type.
    To Do work gets ``todo_hours``, In Progress work ``in_progress_hours``;
    Done and unknown categories get 0.
    """
    if issue.original_estimate_seconds is not None:
        return 0.0
    if not rules.qualifies(issue):
        return 0.0
    category = issue.status.category
    if category is StatusCategory.TODO:
        return float(rules.todo_hours)
    if category is StatusCategory.IN_PROGRESS:
        return float(rules.in_progress_hours)
    return 0.0
