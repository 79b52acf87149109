"""Assignee-based workload rollup of open issues."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from jira_insights.analytics.metrics.derived import round_half_up, whole_days
from jira_insights.analytics.timeseries.reconstruct import as_aware
from jira_insights.core.models import IssueRecord

from .estimates import DEFAULT_ESTIMATE_RULES, EstimateRules, default_hours, explicit_hours


@dataclass(slots=True, frozen=True)
class AssigneeWorkload:
    assignee_name: str
    open_ticket_count: int = 0
    hours_by_estimate: float = 0.0
    hours_by_guess: float = 0.0
    oldest_age_days: int = 0
    average_age_days: float = 0.0
    counts_by_priority: dict[str, int] = field(default_factory=dict)

    @property
    def total_hours(self) -> float:
        return self.hours_by_estimate + self.hours_by_guess

    def to_dict(self) -> dict:
        return {
            "name": self.assignee_name,
            "openTickets": self.open_ticket_count,
            "estimatedHours": round_half_up(self.hours_by_estimate, 1),
            "guessedHours": round_half_up(self.hours_by_guess, 1),
            "totalHours": round_half_up(self.total_hours, 1),
            "oldestTicket": self.oldest_age_days,
            "avgAge": self.average_age_days,
            "byPriority": dict(self.counts_by_priority),
        }


def build_assignee_workload(
    open_issues: Sequence[IssueRecord],
    now: datetime,
    rules: EstimateRules = DEFAULT_ESTIMATE_RULES,
) -> list[AssigneeWorkload]:
    """One row per assignee (``"Unassigned"`` included).

    Sorted by total hours (estimated plus guessed) descending, then by open
    ticket count descending.
    """
    if not open_issues:
        return []
    now_ts = as_aware(now)
    rows = [
        {
            "assignee": i.assignee_name,
            "key": i.key,
            "priority": i.priority,
            "age_days": whole_days(as_aware(i.created), now_ts) if i.created is not None else None,
            "estimated": explicit_hours(i),
            "guessed": default_hours(i, rules),
        }
        for i in open_issues
    ]
    df = pd.DataFrame(rows)
    df["age_days"] = pd.to_numeric(df["age_days"], errors="coerce")
    grouped = (
        df.groupby("assignee")
        .agg(
            open_tickets=("key", "count"),
            estimated=("estimated", "sum"),
            guessed=("guessed", "sum"),
            oldest=("age_days", "max"),
            avg_age=("age_days", "mean"),
        )
        .reset_index()
    )
    grouped["total"] = grouped["estimated"] + grouped["guessed"]
    grouped = grouped.sort_values(
        by=["total", "open_tickets", "assignee"], ascending=[False, False, True], kind="mergesort"
    )
    priorities = df.groupby(["assignee", "priority"]).size()

    out: list[AssigneeWorkload] = []
    for row in grouped.itertuples(index=False):
        by_priority = priorities.loc[row.assignee].sort_values(ascending=False)
        out.append(
            AssigneeWorkload(
                assignee_name=row.assignee,
                open_ticket_count=int(row.open_tickets),
                hours_by_estimate=float(row.estimated),
                hours_by_guess=float(row.guessed),
                oldest_age_days=0 if pd.isna(row.oldest) else int(row.oldest),
                average_age_days=0.0 if pd.isna(row.avg_age) else round_half_up(float(row.avg_age), 1),
                counts_by_priority={str(k): int(v) for k, v in by_priority.items()},
            )
        )
    return out
