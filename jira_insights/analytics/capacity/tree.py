"""Work breakdown tree for capacity planning.

Open issues are folded into a tree of :class:`WorkGroup` nodes following the
placement rules in :mod:`grouping`. Every node stores only its *direct*
values; totals are always derived from the subtree, so a node's aggregate
equals its direct values plus its descendants' aggregates by construction.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from jira_insights.analytics.metrics.derived import round_half_up
from jira_insights.core.config import (
    BUCKET_BAU,
    BUCKET_DELIVER,
    BUCKET_IMPROVE,
    CAPACITY_BUCKETS,
    INITIATIVE_ISSUE_TYPE,
    INITIATIVE_PROJECT,
    SERVICE_REQUEST_PROJECTS,
)
from jira_insights.core.models import EpicRecord, Initiative, IssueRecord

from .estimates import DEFAULT_ESTIMATE_RULES, EstimateRules, default_hours, explicit_hours
from .grouping import SERVICE_GROUP_KEY, GroupingContext, GroupSpec, GroupType, place_issue


@dataclass(slots=True, frozen=True)
class WorkGroup:
    key: str
    display_name: str
    group_type: GroupType
    direct_ticket_count: int = 0
    direct_estimated_hours: float = 0.0
    direct_guessed_hours: float = 0.0
    children: tuple[WorkGroup, ...] = ()
    parent_group_name: str | None = None

    @property
    def total_tickets(self) -> int:
        return self.direct_ticket_count + sum(c.total_tickets for c in self.children)

    @property
    def total_estimated_hours(self) -> float:
        return self.direct_estimated_hours + sum(c.total_estimated_hours for c in self.children)

    @property
    def total_guessed_hours(self) -> float:
        return self.direct_guessed_hours + sum(c.total_guessed_hours for c in self.children)

    @property
    def total_hours(self) -> float:
        return self.total_estimated_hours + self.total_guessed_hours

    def contains_type(self, group_type: GroupType) -> bool:
        """True when this group or any descendant has ``group_type``."""
        return self.group_type is group_type or any(c.contains_type(group_type) for c in self.children)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.display_name,
            "type": self.group_type.value,
            "parentName": self.parent_group_name,
            "tickets": self.total_tickets,
            "estimatedHours": round_half_up(self.total_estimated_hours, 1),
            "guessedHours": round_half_up(self.total_guessed_hours, 1),
            "totalHours": round_half_up(self.total_hours, 1),
            "directTickets": self.direct_ticket_count,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass(slots=True)
class _Node:
    spec: GroupSpec
    parent_name: str | None
    tickets: int = 0
    estimated: float = 0.0
    guessed: float = 0.0
    children: dict[str, _Node] = field(default_factory=dict)

    def freeze(self) -> WorkGroup:
        return WorkGroup(
            key=self.spec.key,
            display_name=self.spec.display_name,
            group_type=self.spec.group_type,
            direct_ticket_count=self.tickets,
            direct_estimated_hours=self.estimated,
            direct_guessed_hours=self.guessed,
            children=tuple(sort_groups(c.freeze() for c in self.children.values())),
            parent_group_name=self.parent_name,
        )


def sort_groups(groups) -> list[WorkGroup]:
    return sorted(groups, key=lambda g: (-g.total_hours, -g.total_tickets, g.display_name))


def build_work_tree(
    open_issues: Sequence[IssueRecord],
    epics: Mapping[str, EpicRecord] | None = None,
    initiatives: Mapping[str, Initiative] | None = None,
    *,
    service_projects: frozenset[str] = SERVICE_REQUEST_PROJECTS,
    initiative_project: str = INITIATIVE_PROJECT,
    initiative_issue_type: str = INITIATIVE_ISSUE_TYPE,
    estimate_rules: EstimateRules = DEFAULT_ESTIMATE_RULES,
) -> list[WorkGroup]:
    """Fold open issues into top-level work groups, largest first."""
    ctx = GroupingContext(
        epics=dict(epics or {}),
        initiatives=dict(initiatives or {}),
        service_projects=frozenset(service_projects),
        initiative_project=initiative_project,
        initiative_issue_type=initiative_issue_type,
    )
    roots: dict[str, _Node] = {}
    for issue in open_issues:
        path = place_issue(issue, ctx).path(issue, ctx)
        level = roots
        parent_name: str | None = None
        node: _Node | None = None
        for spec in path:
            node = level.get(spec.key)
            if node is None:
                node = level[spec.key] = _Node(spec, parent_name)
            parent_name = spec.display_name
            level = node.children
        node.tickets += 1
        node.estimated += explicit_hours(issue)
        node.guessed += default_hours(issue, estimate_rules)
    return sort_groups(n.freeze() for n in roots.values())


def partition_buckets(groups: Sequence[WorkGroup]) -> dict[str, list[WorkGroup]]:
    """Split top-level groups into BAU, Improve and Deliver, each sorted by hours."""
    buckets: dict[str, list[WorkGroup]] = {name: [] for name in CAPACITY_BUCKETS}
    for group in groups:
        if group.key == SERVICE_GROUP_KEY:
            buckets[BUCKET_BAU].append(group)
        elif group.contains_type(GroupType.INITIATIVE):
            buckets[BUCKET_IMPROVE].append(group)
        else:
            buckets[BUCKET_DELIVER].append(group)
    return {name: sort_groups(members) for name, members in buckets.items()}
