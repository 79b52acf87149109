"""Placement rules deciding where an open issue sits in the work tree.

Rules are evaluated in a fixed priority order; the first one that applies
wins:

1. ``InitiativeLinked`` - the parent epic, or else the issue itself, links to
   a top-level initiative.
2. ``ServiceProject`` - the issue belongs to a service request project.
3. ``HasParentEpic`` - the issue has a parent epic.
4. ``Fallback`` - grouped by project and issue type.

Each placement yields a path of :class:`GroupSpec` from the top-level group
down to the group that receives the issue's counts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from jira_insights.core.config import (
    INITIATIVE_ISSUE_TYPE,
    INITIATIVE_PROJECT,
    SERVICE_REQUEST_PROJECTS,
    SERVICE_REQUESTS_GROUP,
)
from jira_insights.core.models import EpicRecord, Initiative, IssueLink, IssueRecord, ParentRef

SERVICE_GROUP_KEY = "service-requests"
EPIC_ISSUE_TYPE = "Epic"


class GroupType(Enum):
    ISSUE = "Issue"
    EPIC = "Epic"
    INITIATIVE = "Initiative"
    PROJECT_BUCKET = "ProjectBucket"


@dataclass(slots=True, frozen=True)
class GroupSpec:
    key: str
    display_name: str
    group_type: GroupType


@dataclass(slots=True, frozen=True)
class GroupingContext:
    epics: Mapping[str, EpicRecord] = field(default_factory=dict)
    initiatives: Mapping[str, Initiative] = field(default_factory=dict)
    service_projects: frozenset[str] = SERVICE_REQUEST_PROJECTS
    initiative_project: str = INITIATIVE_PROJECT
    initiative_issue_type: str = INITIATIVE_ISSUE_TYPE

    def parent_epic(self, issue: IssueRecord) -> ParentRef | None:
        parent = issue.parent
        if parent is None:
            return None
        if parent.key in self.epics or parent.issue_type in (None, EPIC_ISSUE_TYPE):
            return parent
        return None

    def epic_project(self, epic: ParentRef) -> str:
        record = self.epics.get(epic.key)
        if record is not None and record.project_key:
            return record.project_key
        return epic.key.split("-", 1)[0]

    def linked_initiative(self, links: Iterable[IssueLink]) -> Initiative | None:
        for link in links:
            known = self.initiatives.get(link.key)
            if known is not None:
                return known
            if link.issue_type == self.initiative_issue_type and link.project_key == self.initiative_project:
                return Initiative(link.key, link.summary)
        return None


def _epic_spec(epic: ParentRef, ctx: GroupingContext) -> GroupSpec:
    record = ctx.epics.get(epic.key)
    summary = epic.summary or (record.summary if record is not None else "")
    return GroupSpec(epic.key, summary or epic.key, GroupType.EPIC)


@dataclass(slots=True, frozen=True)
class InitiativeLinked:
    initiative: Initiative
    epic: ParentRef | None = None

    def path(self, issue: IssueRecord, ctx: GroupingContext) -> tuple[GroupSpec, ...]:
        top = GroupSpec(
            f"initiative:{self.initiative.key}",
            self.initiative.summary or self.initiative.key,
            GroupType.INITIATIVE,
        )
        if self.epic is not None:
            return (top, _epic_spec(self.epic, ctx))
        return (top, GroupSpec(issue.key, issue.summary or issue.key, GroupType.ISSUE))


@dataclass(slots=True, frozen=True)
class ServiceProject:
    epic: ParentRef | None = None

    def path(self, issue: IssueRecord, ctx: GroupingContext) -> tuple[GroupSpec, ...]:
        top = GroupSpec(SERVICE_GROUP_KEY, SERVICE_REQUESTS_GROUP, GroupType.PROJECT_BUCKET)
        if self.epic is not None:
            return (top, _epic_spec(self.epic, ctx))
        return (
            top,
            GroupSpec(f"{SERVICE_GROUP_KEY}:{issue.issue_type}", issue.issue_type, GroupType.PROJECT_BUCKET),
        )


@dataclass(slots=True, frozen=True)
class HasParentEpic:
    epic: ParentRef

    def path(self, issue: IssueRecord, ctx: GroupingContext) -> tuple[GroupSpec, ...]:
        project = ctx.epic_project(self.epic)
        return (
            GroupSpec(f"project:{project}", project, GroupType.PROJECT_BUCKET),
            _epic_spec(self.epic, ctx),
        )


@dataclass(slots=True, frozen=True)
class Fallback:
    project_key: str
    issue_type: str

    def path(self, issue: IssueRecord, ctx: GroupingContext) -> tuple[GroupSpec, ...]:
        return (
            GroupSpec(
                f"project:{self.project_key}:{self.issue_type}",
                f"{self.project_key} {self.issue_type}".strip(),
                GroupType.PROJECT_BUCKET,
            ),
        )


Placement = InitiativeLinked | ServiceProject | HasParentEpic | Fallback


def match_initiative_linked(issue: IssueRecord, ctx: GroupingContext) -> Placement | None:
    epic = ctx.parent_epic(issue)
    if epic is not None:
        record = ctx.epics.get(epic.key)
        initiative = ctx.linked_initiative(record.links) if record is not None else None
        if initiative is not None:
            return InitiativeLinked(initiative, epic)
    initiative = ctx.linked_initiative(issue.links)
    if initiative is not None:
        return InitiativeLinked(initiative, None)
    return None


def match_service_project(issue: IssueRecord, ctx: GroupingContext) -> Placement | None:
    if issue.project_key in ctx.service_projects:
        return ServiceProject(ctx.parent_epic(issue))
    return None


def match_parent_epic(issue: IssueRecord, ctx: GroupingContext) -> Placement | None:
    epic = ctx.parent_epic(issue)
    if epic is not None:
        return HasParentEpic(epic)
    return None


def match_fallback(issue: IssueRecord, ctx: GroupingContext) -> Placement | None:
    return Fallback(issue.project_key, issue.issue_type)


PlacementRule = Callable[[IssueRecord, GroupingContext], Placement | None]

PLACEMENT_RULES: tuple[PlacementRule, ...] = (
    match_initiative_linked,
    match_service_project,
    match_parent_epic,
    match_fallback,
)


def place_issue(issue: IssueRecord, ctx: GroupingContext) -> Placement:
    for rule in PLACEMENT_RULES:
        placement = rule(issue, ctx)
        if placement is not None:
            return placement
    raise AssertionError("fallback placement always applies")  # pragma: no cover
