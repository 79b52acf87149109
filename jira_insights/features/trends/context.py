"""Service desk volume trends over a reporting window.

``to_dict`` keys:

- ``volumeData``: one ``{date, created, resolved, openTickets, avgAge}`` per day
- ``resolutionMetrics``: ``totalCreated``, ``totalResolved``,
  ``avgResolutionTimeHours``, ``avgResolutionTimeDays``, ``resolutionRate``
  plus ``incidentCount``, ``avgIncidentResolutionTimeHours`` and
  ``avgIncidentResolutionTimeDays``; all scoped to the window
- ``statusBreakdown`` / ``priorityBreakdown``: counts over every fetched issue
- ``periodDays``
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import date

import pytz

from jira_insights.analytics.metrics.aggregate import count_by
from jira_insights.analytics.timeseries.reconstruct import TimeSeriesPoint, reconstruct
from jira_insights.analytics.timeseries.resolution import ResolutionStats, resolution_stats
from jira_insights.core.config import INCIDENT_ISSUE_TYPES
from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import IssueRecord


@dataclass(slots=True, frozen=True)
class TrendsReport:
    volume: tuple[TimeSeriesPoint, ...] = ()
    resolution: ResolutionStats = field(default_factory=ResolutionStats)
    incidents: ResolutionStats = field(default_factory=ResolutionStats)
    status_breakdown: dict[str, int] = field(default_factory=dict)
    priority_breakdown: dict[str, int] = field(default_factory=dict)
    period_days: int = 0

    def to_dict(self) -> dict:
        metrics = self.resolution.to_dict()
        metrics.update(
            {
                "incidentCount": self.incidents.total_resolved,
                "avgIncidentResolutionTimeHours": self.incidents.avg_resolution_hours,
                "avgIncidentResolutionTimeDays": self.incidents.avg_resolution_days,
            }
        )
        return {
            "volumeData": [p.to_dict() for p in self.volume],
            "resolutionMetrics": metrics,
            "statusBreakdown": dict(self.status_breakdown),
            "priorityBreakdown": dict(self.priority_breakdown),
            "periodDays": self.period_days,
        }


def build_trends_report(
    issues: Sequence[IssueRecord],
    window_start: date,
    window_end: date,
    *,
    skip_weekends: bool = False,
    tz: str | pytz.BaseTzInfo | None = None,
    strategy: str = "scan",
    incident_types: Collection[str] = INCIDENT_ISSUE_TYPES,
) -> TrendsReport:
    """Daily volume and window-scoped resolution metrics.

    ``issues`` should include tickets created before the window that are
    still open (or were open during it) so the daily open counts are right.
    """
    df = issues_to_dataframe(issues)
    points = reconstruct(
        issues, window_start, window_end, skip_weekends=skip_weekends, tz=tz, strategy=strategy
    )
    return TrendsReport(
        volume=tuple(points),
        resolution=resolution_stats(issues, window_start, window_end, tz=tz),
        incidents=resolution_stats(issues, window_start, window_end, tz=tz, issue_types=incident_types),
        status_breakdown=count_by(df, "status"),
        priority_breakdown=count_by(df, "priority"),
        period_days=max((window_end - window_start).days + 1, 0),
    )
