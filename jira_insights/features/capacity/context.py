"""Capacity planning: flow of work, assignee load and the work breakdown tree.

``to_dict`` keys:

- ``summary``: ``totalOpenTickets``, ``ticketsCreated``, ``ticketsResolved``,
  ``avgResolutionTime`` (days), ``velocity`` (resolved per week), ``netFlow``,
  ``flowTrend`` (``increasing``/``decreasing``/``stable``), ``period``
- ``ticketFlow``: ``[{date, created, resolved}]``
- ``assigneeWorkload``: see :class:`AssigneeWorkload`
- ``workBreakdown``: ``{BAU|Improve|Deliver: {tickets, totalHours, groups}}``
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime

import pytz

from jira_insights.analytics.capacity.tree import WorkGroup, build_work_tree, partition_buckets
from jira_insights.analytics.capacity.workload import AssigneeWorkload, build_assignee_workload
from jira_insights.analytics.metrics.aggregate import throughput_per_week
from jira_insights.analytics.metrics.derived import round_half_up
from jira_insights.analytics.timeseries.reconstruct import TimeSeriesPoint, reconstruct
from jira_insights.analytics.timeseries.resolution import resolution_stats
from jira_insights.core.config import CAPACITY_BUCKETS, UNKNOWN
from jira_insights.core.models import EpicRecord, Initiative, IssueRecord
from jira_insights.core.settings import DEFAULT_SETTINGS, InsightSettings


@dataclass(slots=True, frozen=True)
class CapacitySummary:
    total_open_tickets: int = 0
    tickets_created: int = 0
    tickets_resolved: int = 0
    avg_resolution_days: float = 0.0
    velocity: int = 0
    period_days: int = 0

    @property
    def net_flow(self) -> int:
        return self.tickets_created - self.tickets_resolved

    @property
    def flow_trend(self) -> str:
        if self.net_flow > 0:
            return "increasing"
        if self.net_flow < 0:
            return "decreasing"
        return "stable"

    def to_dict(self) -> dict:
        return {
            "totalOpenTickets": self.total_open_tickets,
            "ticketsCreated": self.tickets_created,
            "ticketsResolved": self.tickets_resolved,
            "avgResolutionTime": self.avg_resolution_days,
            "velocity": self.velocity,
            "netFlow": self.net_flow,
            "flowTrend": self.flow_trend,
            "period": self.period_days,
        }


@dataclass(slots=True, frozen=True)
class CapacityReport:
    summary: CapacitySummary = field(default_factory=CapacitySummary)
    ticket_flow: tuple[TimeSeriesPoint, ...] = ()
    workload: tuple[AssigneeWorkload, ...] = ()
    buckets: Mapping[str, Sequence[WorkGroup]] = field(
        default_factory=lambda: {name: [] for name in CAPACITY_BUCKETS}
    )

    def to_dict(self) -> dict:
        breakdown = {}
        for name, groups in self.buckets.items():
            breakdown[name] = {
                "tickets": sum(g.total_tickets for g in groups),
                "totalHours": round_half_up(sum(g.total_hours for g in groups), 1),
                "groups": [g.to_dict() for g in groups],
            }
        return {
            "summary": self.summary.to_dict(),
            "ticketFlow": [
                {"date": p.date.isoformat(), "created": p.created_count, "resolved": p.resolved_count}
                for p in self.ticket_flow
            ],
            "assigneeWorkload": [w.to_dict() for w in self.workload],
            "workBreakdown": breakdown,
        }


def _merge_by_key(*collections: Sequence[IssueRecord]) -> list[IssueRecord]:
    merged: dict[str | int, IssueRecord] = {}
    for issues in collections:
        for issue in issues:
            # records without a key only match themselves
            merged.setdefault(id(issue) if issue.key == UNKNOWN else issue.key, issue)
    return list(merged.values())


def build_capacity_report(
    open_issues: Sequence[IssueRecord],
    created: Sequence[IssueRecord],
    resolved: Sequence[IssueRecord],
    epics: Mapping[str, EpicRecord] | None,
    initiatives: Mapping[str, Initiative] | None,
    window_start: date,
    window_end: date,
    now: datetime,
    settings: InsightSettings = DEFAULT_SETTINGS,
    *,
    tz: str | pytz.BaseTzInfo | None = None,
) -> CapacityReport:
    """Assemble the capacity report from independently fetched collections.

    ``created`` and ``resolved`` may overlap; issues are de-duplicated by key
    before counting so a ticket opened and closed inside the window counts
    once on each side of the flow.
    """
    zone = tz or settings.timezone
    period_days = max((window_end - window_start).days + 1, 0)
    flow_issues = _merge_by_key(created, resolved)
    stats = resolution_stats(flow_issues, window_start, window_end, tz=zone)
    groups = build_work_tree(
        open_issues,
        epics,
        initiatives,
        service_projects=settings.service_projects,
        initiative_project=settings.initiative_project,
        initiative_issue_type=settings.initiative_issue_type,
        estimate_rules=settings.estimate_rules,
    )
    summary = CapacitySummary(
        total_open_tickets=len(open_issues),
        tickets_created=stats.total_created,
        tickets_resolved=stats.total_resolved,
        avg_resolution_days=stats.avg_resolution_days,
        velocity=throughput_per_week(stats.total_resolved, period_days),
        period_days=period_days,
    )
    return CapacityReport(
        summary=summary,
        ticket_flow=tuple(reconstruct(flow_issues, window_start, window_end, tz=zone)),
        workload=tuple(build_assignee_workload(open_issues, now, settings.estimate_rules)),
        buckets=partition_buckets(groups),
    )
