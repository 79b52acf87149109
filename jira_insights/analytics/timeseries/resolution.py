"""Resolution-time statistics scoped to a reporting window."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import date, datetime

import pytz

from jira_insights.analytics.metrics.derived import percentage, round_half_up, safe_mean, whole_days
from jira_insights.core.models import IssueRecord

from .reconstruct import as_aware, local_day, resolve_tz


@dataclass(slots=True, frozen=True)
class ResolutionStats:
    total_created: int = 0
    total_resolved: int = 0
    avg_resolution_hours: float = 0.0
    avg_resolution_days: float = 0.0
    resolution_rate: int = 0

    def to_dict(self) -> dict:
        return {
            "totalCreated": self.total_created,
            "totalResolved": self.total_resolved,
            "avgResolutionTimeHours": self.avg_resolution_hours,
            "avgResolutionTimeDays": self.avg_resolution_days,
            "resolutionRate": self.resolution_rate,
        }


@dataclass(slots=True, frozen=True)
class OpenAgeSnapshot:
    avg_age: float = 0.0
    total_open: int = 0
    oldest_age: int = 0

    def to_dict(self) -> dict:
        return {"avgAge": self.avg_age, "totalOpen": self.total_open, "oldestTicketAge": self.oldest_age}


def _in_window(ts: datetime | None, window_start: date, window_end: date, tz) -> bool:
    if ts is None:
        return False
    return window_start <= local_day(ts, tz) <= window_end


def resolution_stats(
    issues: Sequence[IssueRecord],
    window_start: date,
    window_end: date,
    *,
    tz: str | pytz.BaseTzInfo | None = None,
    issue_types: Collection[str] | None = None,
) -> ResolutionStats:
    """Created/resolved counts and resolution averages for one report period.

    Only issues whose resolution falls inside the window contribute to the
    averages and to ``total_resolved``; issues resolved before or after the
    period are ignored even if they were fetched.
    """
    zone = resolve_tz(tz)
    scoped = [i for i in issues if issue_types is None or i.issue_type in issue_types]
    created = [i for i in scoped if _in_window(i.created, window_start, window_end, zone)]
    resolved = [i for i in scoped if _in_window(i.resolved, window_start, window_end, zone)]
    hours = [
        (as_aware(i.resolved) - as_aware(i.created)).total_seconds() / 3600.0
        for i in resolved
        if i.created is not None
    ]
    avg_hours = safe_mean(hours)
    return ResolutionStats(
        total_created=len(created),
        total_resolved=len(resolved),
        avg_resolution_hours=round_half_up(avg_hours, 1),
        avg_resolution_days=round_half_up(avg_hours / 24, 1),
        resolution_rate=percentage(len(resolved), len(created)),
    )


def open_age_snapshot(issues: Sequence[IssueRecord], now: datetime) -> OpenAgeSnapshot:
    """Average and oldest age (whole days) of the currently open issues."""
    ages = [whole_days(as_aware(i.created), as_aware(now)) for i in issues if i.is_open and i.created is not None]
    if not ages:
        return OpenAgeSnapshot()
    return OpenAgeSnapshot(
        avg_age=round_half_up(safe_mean(ages), 1),
        total_open=len(ages),
        oldest_age=max(ages),
    )
