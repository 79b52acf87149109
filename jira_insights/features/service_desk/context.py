"""Service desk analytics: volumes, top contributors and text categories.

``to_dict`` keys:

- ``totalTickets``, ``resolutionRate``, ``totalResolvedInPeriod``,
  ``avgResolutionTimeDays`` (window-scoped)
- ``allCounts``: ``issueTypes``, ``statuses``, ``priorities``
- ``topAssignees`` / ``topRequestTypes``: ``[{name, count}]``
- ``topApplications``: ``[{name, count, examples}]``, multi-label
- ``incidentAnalysis``: ``totalIncidents`` and ``rootCauses``
  (``[{category, count, percentage, examples}]``, one cause per incident)
- ``requestTypeBreakdown``: ``{type: {total, subCategories}}``
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

import pytz

from jira_insights.analytics.metrics.aggregate import count_by
from jira_insights.analytics.metrics.derived import percentage
from jira_insights.analytics.text.classifier import CategoryBucket, MatchMode, categorize
from jira_insights.analytics.timeseries.resolution import ResolutionStats, resolution_stats
from jira_insights.core.config import DEFAULT_TOP_N, INCIDENT_ISSUE_TYPES, UNKNOWN
from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import IssueRecord
from jira_insights.core.settings import DEFAULT_SETTINGS, InsightSettings


@dataclass(slots=True, frozen=True)
class RequestTypeBreakdown:
    total: int
    sub_categories: tuple[CategoryBucket, ...] = ()

    def to_dict(self) -> dict:
        return {"total": self.total, "subCategories": [b.to_dict() for b in self.sub_categories]}


@dataclass(slots=True, frozen=True)
class ServiceDeskReport:
    total_tickets: int = 0
    resolution: ResolutionStats = field(default_factory=ResolutionStats)
    issue_types: dict[str, int] = field(default_factory=dict)
    statuses: dict[str, int] = field(default_factory=dict)
    priorities: dict[str, int] = field(default_factory=dict)
    top_assignees: tuple[tuple[str, int], ...] = ()
    top_request_types: tuple[tuple[str, int], ...] = ()
    top_applications: tuple[CategoryBucket, ...] = ()
    total_incidents: int = 0
    root_causes: tuple[CategoryBucket, ...] = ()
    request_types: Mapping[str, RequestTypeBreakdown] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalTickets": self.total_tickets,
            "resolutionRate": self.resolution.resolution_rate,
            "totalResolvedInPeriod": self.resolution.total_resolved,
            "avgResolutionTimeDays": self.resolution.avg_resolution_days,
            "allCounts": {
                "issueTypes": dict(self.issue_types),
                "statuses": dict(self.statuses),
                "priorities": dict(self.priorities),
            },
            "topAssignees": [{"name": n, "count": c} for n, c in self.top_assignees],
            "topRequestTypes": [{"name": n, "count": c} for n, c in self.top_request_types],
            "topApplications": [b.to_dict() for b in self.top_applications],
            "incidentAnalysis": {
                "totalIncidents": self.total_incidents,
                "rootCauses": [
                    {
                        "category": b.label,
                        "count": b.count,
                        "percentage": percentage(b.count, self.total_incidents),
                        "examples": [e.to_dict() for e in b.examples],
                    }
                    for b in self.root_causes
                ],
            },
            "requestTypeBreakdown": {name: rt.to_dict() for name, rt in self.request_types.items()},
        }


def _top(counts: Mapping[str, int], n: int) -> tuple[tuple[str, int], ...]:
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return tuple(ranked[: max(n, 0)])


def request_type_breakdown(
    issues: Sequence[IssueRecord], settings: InsightSettings = DEFAULT_SETTINGS
) -> dict[str, RequestTypeBreakdown]:
    """Per request type, a first-match sub-category tally using that type's rule table."""
    members: dict[str, list[IssueRecord]] = {}
    for issue in issues:
        members.setdefault(issue.request_type or UNKNOWN, []).append(issue)
    ordered = sorted(members.items(), key=lambda kv: (-len(kv[1]), kv[0]))
    return {
        name: RequestTypeBreakdown(
            total=len(group),
            sub_categories=tuple(
                categorize(
                    group,
                    settings.subcategory_rules(name),
                    MatchMode.FIRST_MATCH,
                    max_examples=settings.max_examples,
                )
            ),
        )
        for name, group in ordered
    }


def build_service_desk_report(
    issues: Sequence[IssueRecord],
    window_start: date,
    window_end: date,
    settings: InsightSettings = DEFAULT_SETTINGS,
    *,
    tz: str | pytz.BaseTzInfo | None = None,
    top_n: int = DEFAULT_TOP_N,
    incident_types: Collection[str] = INCIDENT_ISSUE_TYPES,
) -> ServiceDeskReport:
    if not issues:
        return ServiceDeskReport()
    df = issues_to_dataframe(issues)
    incidents = [i for i in issues if i.issue_type in incident_types]
    applications = categorize(
        issues, settings.application_rules, MatchMode.ALL_MATCHES, max_examples=settings.max_examples
    )
    return ServiceDeskReport(
        total_tickets=len(issues),
        resolution=resolution_stats(issues, window_start, window_end, tz=tz),
        issue_types=count_by(df, "issuetype"),
        statuses=count_by(df, "status"),
        priorities=count_by(df, "priority"),
        top_assignees=_top(count_by(df, "assignee"), top_n),
        top_request_types=_top(count_by(df, "request_type"), top_n),
        top_applications=tuple(applications[: max(top_n, 0)]),
        total_incidents=len(incidents),
        root_causes=tuple(
            categorize(
                incidents, settings.root_cause_rules, MatchMode.FIRST_MATCH, max_examples=settings.max_examples
            )
        ),
        request_types=request_type_breakdown(issues, settings),
    )
