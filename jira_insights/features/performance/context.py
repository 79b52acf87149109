"""Team performance over a trailing period."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from jira_insights.analytics.metrics.aggregate import aggregate, throughput_per_week
from jira_insights.core.models import IssueRecord
from jira_insights.core.status import is_in_progress_name


@dataclass(slots=True, frozen=True)
class PerformanceReport:
    avg_cycle_time_days: int = 0
    avg_lead_time_days: int = 0
    throughput: int = 0
    total_issues: int = 0
    resolved_issues: int = 0
    in_progress_issues: int = 0
    period_days: int = 0

    def to_dict(self) -> dict:
        return {
            "avgCycleTime": self.avg_cycle_time_days,
            "avgLeadTime": self.avg_lead_time_days,
            "throughput": self.throughput,
            "totalIssues": self.total_issues,
            "resolvedIssues": self.resolved_issues,
            "inProgressIssues": self.in_progress_issues,
            "periodDays": self.period_days,
        }


def build_performance_report(issues: Sequence[IssueRecord], period_days: int) -> PerformanceReport:
    """Summarise issues created or resolved within the last ``period_days``.

    Throughput is resolved issues per week over the period, rounded half-up.
    """
    metrics = aggregate(issues)
    resolved = sum(1 for i in issues if i.resolved is not None)
    return PerformanceReport(
        avg_cycle_time_days=metrics.avg_cycle_time_days,
        avg_lead_time_days=metrics.avg_lead_time_days,
        throughput=throughput_per_week(resolved, period_days),
        total_issues=len(issues),
        resolved_issues=resolved,
        in_progress_issues=sum(1 for i in issues if is_in_progress_name(i.status.name)),
        period_days=period_days,
    )
