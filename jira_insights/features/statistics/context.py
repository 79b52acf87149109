"""Issue statistics report: totals, categorical breakdowns and average durations.

``to_dict`` keys: ``totalIssues``, ``byStatus``, ``byType``, ``byPriority``,
``byAssignee``, ``avgCycleTime``, ``avgLeadTime`` (whole days).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from jira_insights.analytics.metrics.aggregate import IssueMetrics, aggregate
from jira_insights.core.models import IssueRecord


@dataclass(slots=True, frozen=True)
class StatisticsReport:
    metrics: IssueMetrics = field(default_factory=IssueMetrics)

    def to_dict(self) -> dict:
        m = self.metrics
        return {
            "totalIssues": m.total_issues,
            "byStatus": dict(m.by_status),
            "byType": dict(m.by_type),
            "byPriority": dict(m.by_priority),
            "byAssignee": dict(m.by_assignee),
            "avgCycleTime": m.avg_cycle_time_days,
            "avgLeadTime": m.avg_lead_time_days,
        }


def build_statistics_report(issues: Sequence[IssueRecord]) -> StatisticsReport:
    return StatisticsReport(aggregate(issues))
