"""Daily open-ticket reconstruction from creation/resolution timestamps.

Issues only carry their current state, so the number of tickets open on a
past day is rebuilt from the two timestamps: an issue is open on day ``D``
when it was created on or before the end of ``D`` and was not resolved by
the end of ``D``.

Two strategies are provided and must agree on every point:

- ``scan``: evaluates the definition above for every day over every issue.
- ``sweep``: accumulates +1 on the creation day and -1 on the resolution day
  and reads the running total on each day of the window.

Ages are summed in whole seconds so both strategies produce identical
averages.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time

import pandas as pd
import pytz

from jira_insights.analytics.metrics.derived import SECONDS_PER_DAY, round_half_up
from jira_insights.core.config import TIMEZONE
from jira_insights.core.models import IssueRecord

STRATEGIES = ("scan", "sweep")
_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


@dataclass(slots=True, frozen=True)
class TimeSeriesPoint:
    date: date
    created_count: int = 0
    resolved_count: int = 0
    open_count: int = 0
    average_age_days: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "created": self.created_count,
            "resolved": self.resolved_count,
            "openTickets": self.open_count,
            "avgAge": self.average_age_days,
        }


def resolve_tz(tz: str | pytz.BaseTzInfo | None) -> pytz.BaseTzInfo:
    if tz is None:
        return pytz.timezone(TIMEZONE)
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def as_aware(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if ts.tzinfo is None:
        return pytz.UTC.localize(ts)
    return ts


def local_day(ts: datetime, tz: pytz.BaseTzInfo) -> date:
    return as_aware(ts).astimezone(tz).date()


def end_of_day(day: date, tz: pytz.BaseTzInfo) -> datetime:
    return tz.localize(datetime.combine(day, time.max))


def epoch_seconds(ts: datetime) -> int:
    return int((as_aware(ts) - _EPOCH).total_seconds() // 1)


def window_days(window_start: date, window_end: date, *, skip_weekends: bool = False) -> list[date]:
    """Calendar days in ``[window_start, window_end]``, optionally Monday-Friday only."""
    if window_end < window_start:
        return []
    days = pd.date_range(window_start, window_end, freq="D")
    if skip_weekends:
        days = days[days.dayofweek < 5]
    return [d.date() for d in days]


def daily_counts(issues: Sequence[IssueRecord], tz: pytz.BaseTzInfo) -> tuple[Counter, Counter]:
    """Issues created and resolved per local calendar day."""
    created: Counter = Counter()
    resolved: Counter = Counter()
    for issue in issues:
        if issue.created is not None:
            created[local_day(issue.created, tz)] += 1
        if issue.resolved is not None:
            resolved[local_day(issue.resolved, tz)] += 1
    return created, resolved


def _average_age(open_count: int, created_seconds_sum: int, eod_seconds: int) -> float:
    if open_count <= 0:
        return 0.0
    total_age = open_count * eod_seconds - created_seconds_sum
    return round_half_up(total_age / open_count / SECONDS_PER_DAY, 1)


def _open_by_scan(
    issues: Sequence[IssueRecord], days: Sequence[date], tz: pytz.BaseTzInfo
) -> list[tuple[int, float]]:
    spans = [
        (as_aware(i.created), as_aware(i.resolved) if i.resolved is not None else None)
        for i in issues
        if i.created is not None
    ]
    out: list[tuple[int, float]] = []
    for day in days:
        eod = end_of_day(day, tz)
        open_created = [c for c, r in spans if c <= eod and (r is None or r > eod)]
        age = _average_age(len(open_created), sum(epoch_seconds(c) for c in open_created), epoch_seconds(eod))
        out.append((len(open_created), age))
    return out


def _open_by_sweep(
    issues: Sequence[IssueRecord], days: Sequence[date], tz: pytz.BaseTzInfo
) -> list[tuple[int, float]]:
    if not days:
        return []
    rows = []
    for issue in issues:
        if issue.created is None:
            continue
        created = as_aware(issue.created)
        created_s = epoch_seconds(created)
        rows.append((pd.Timestamp(local_day(created, tz)), 1, created_s))
        if issue.resolved is not None:
            # A resolution stamped before creation closes the issue on its creation day
            resolved = max(as_aware(issue.resolved), created)
            rows.append((pd.Timestamp(local_day(resolved, tz)), -1, -created_s))
    if not rows:
        return [(0, 0.0) for _ in days]

    events = pd.DataFrame(rows, columns=["day", "delta", "created_s"])
    running = events.groupby("day")[["delta", "created_s"]].sum().sort_index().cumsum()
    index = pd.DatetimeIndex([pd.Timestamp(d) for d in days])
    on_days = running.reindex(index, method="ffill").fillna(0)

    out: list[tuple[int, float]] = []
    for day, (open_count, created_sum) in zip(days, on_days.itertuples(index=False), strict=True):
        n = int(open_count)
        age = _average_age(n, int(created_sum), epoch_seconds(end_of_day(day, tz)))
        out.append((n, age))
    return out


def reconstruct(
    issues: Sequence[IssueRecord],
    window_start: date,
    window_end: date,
    *,
    skip_weekends: bool = False,
    tz: str | pytz.BaseTzInfo | None = None,
    strategy: str = "scan",
) -> list[TimeSeriesPoint]:
    """Build one :class:`TimeSeriesPoint` per day of the window.

    Parameters
    ----------
    issues : sequence of IssueRecord
        Every issue that may have been open during the window, including
        ones created before it.
    window_start, window_end : date
        Inclusive window bounds (local to ``tz``).
    skip_weekends : bool
        Drop Saturdays and Sundays from the output. Open counts on the
        remaining days still account for weekend activity.
    tz : str or tzinfo, optional
        Reporting timezone for day boundaries (defaults to ``TIMEZONE``).
    strategy : {"scan", "sweep"}
        Computation strategy; both give the same result.

    Returns
    -------
    list[TimeSeriesPoint]
        Ordered by date; empty when the window is empty.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy {strategy!r}; expected one of {STRATEGIES}")
    zone = resolve_tz(tz)
    days = window_days(window_start, window_end, skip_weekends=skip_weekends)
    created, resolved = daily_counts(issues, zone)
    if strategy == "sweep":
        open_points = _open_by_sweep(issues, days, zone)
    else:
        open_points = _open_by_scan(issues, days, zone)
    return [
        TimeSeriesPoint(
            date=day,
            created_count=created.get(day, 0),
            resolved_count=resolved.get(day, 0),
            open_count=open_count,
            average_age_days=age,
        )
        for day, (open_count, age) in zip(days, open_points, strict=True)
    ]
