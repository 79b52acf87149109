"""Distribution counts and cycle/lead-time averages over an issue collection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import pandas as pd

from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import IssueRecord

from .derived import round_half_up, safe_mean, whole_days


@dataclass(slots=True, frozen=True)
class IssueMetrics:
    total_issues: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)
    by_assignee: dict[str, int] = field(default_factory=dict)
    avg_cycle_time_days: int = 0
    avg_lead_time_days: int = 0
    resolved_issues: int = 0


def count_by(df: pd.DataFrame, column: str) -> dict[str, int]:
    """Value counts for ``column`` as a plain dict, largest first."""
    if df.empty or column not in df.columns:
        return {}
    counts = df[column].value_counts(sort=True)
    return {str(k): int(v) for k, v in counts.items()}


def resolution_durations(issues: Sequence[IssueRecord]) -> list[int]:
    """Whole days from creation to resolution for issues carrying both timestamps."""
    return [whole_days(i.created, i.resolved) for i in issues if i.created is not None and i.resolved is not None]


def aggregate(issues: Sequence[IssueRecord]) -> IssueMetrics:
    if not issues:
        return IssueMetrics()
    df = issues_to_dataframe(issues)
    durations = resolution_durations(issues)
    # Cycle and lead time share the creation-to-resolution definition
    avg_days = int(round_half_up(safe_mean(durations)))
    return IssueMetrics(
        total_issues=len(issues),
        by_status=count_by(df, "status"),
        by_type=count_by(df, "issuetype"),
        by_priority=count_by(df, "priority"),
        by_assignee=count_by(df, "assignee"),
        avg_cycle_time_days=avg_days,
        avg_lead_time_days=avg_days,
        resolved_issues=len(durations),
    )


def throughput_per_week(resolved_count: int, period_days: int) -> int:
    """Resolved issues per week over ``period_days``; 0 for an empty period."""
    if period_days <= 0:
        return 0
    return int(round_half_up(resolved_count / period_days * 7))
