"""Age of currently open tickets, day by day.

``to_dict`` keys: ``trendData`` (``{date, avgAge, openCount}`` per day),
``currentMetrics`` (``avgAge``, ``totalOpen``, ``oldestTicketAge``),
``statusBreakdown`` and ``periodDays``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

import pytz

from jira_insights.analytics.metrics.aggregate import count_by
from jira_insights.analytics.timeseries.reconstruct import TimeSeriesPoint, reconstruct
from jira_insights.analytics.timeseries.resolution import OpenAgeSnapshot, open_age_snapshot
from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import IssueRecord


@dataclass(slots=True, frozen=True)
class OpenAgeReport:
    trend: tuple[TimeSeriesPoint, ...] = ()
    current: OpenAgeSnapshot = field(default_factory=OpenAgeSnapshot)
    status_breakdown: dict[str, int] = field(default_factory=dict)
    period_days: int = 0

    def to_dict(self) -> dict:
        return {
            "trendData": [
                {"date": p.date.isoformat(), "avgAge": p.average_age_days, "openCount": p.open_count}
                for p in self.trend
            ],
            "currentMetrics": self.current.to_dict(),
            "statusBreakdown": dict(self.status_breakdown),
            "periodDays": self.period_days,
        }


def build_open_age_report(
    issues: Sequence[IssueRecord],
    window_start: date,
    window_end: date,
    now: datetime,
    *,
    tz: str | pytz.BaseTzInfo | None = None,
) -> OpenAgeReport:
    """Trend of open-ticket age across the window plus a snapshot at ``now``.

    Only currently open issues are considered, so each day's open count is
    the number of those issues that already existed by the end of that day.
    """
    open_issues = [i for i in issues if i.is_open]
    return OpenAgeReport(
        trend=tuple(reconstruct(open_issues, window_start, window_end, tz=tz)),
        current=open_age_snapshot(open_issues, now),
        status_breakdown=count_by(issues_to_dataframe(open_issues), "status"),
        period_days=max((window_end - window_start).days + 1, 0),
    )
