"""Completion progress per initiative label.

Issues are grouped either by their project short name or by component (an
issue with several components counts once for each). Each entry serialises
as ``{name, total, completed, inProgress, todo, completionPercentage,
issues: [{key, summary, status}]}``; entries are sorted by ``total``
descending.
"""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from enum import Enum

from jira_insights.analytics.metrics.derived import percentage
from jira_insights.core.config import COMPLETED_STATUSES, UNASSIGNED
from jira_insights.core.models import IssueRecord
from jira_insights.core.status import is_in_progress_name


class InitiativeKey(Enum):
    SHORT_NAME = "short_name"
    COMPONENTS = "components"


@dataclass(slots=True, frozen=True)
class InitiativeProgress:
    name: str
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    issues: tuple[IssueRecord, ...] = field(default=(), repr=False)

    @property
    def completion_percentage(self) -> int:
        return percentage(self.completed, self.total)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "total": self.total,
            "completed": self.completed,
            "inProgress": self.in_progress,
            "todo": self.todo,
            "completionPercentage": self.completion_percentage,
            "issues": [{"key": i.key, "summary": i.summary, "status": i.status.name} for i in self.issues],
        }


def _labels(issue: IssueRecord, key: InitiativeKey) -> tuple[str, ...]:
    if key is InitiativeKey.COMPONENTS:
        return issue.components
    return (issue.short_name or UNASSIGNED,)


def build_initiative_progress(
    issues: Sequence[IssueRecord],
    key: InitiativeKey | str = InitiativeKey.SHORT_NAME,
    *,
    completed_statuses: Collection[str] = COMPLETED_STATUSES,
) -> list[InitiativeProgress]:
    group_key = InitiativeKey(key)
    members: dict[str, list[IssueRecord]] = {}
    for issue in issues:
        for label in _labels(issue, group_key):
            members.setdefault(label, []).append(issue)

    out: list[InitiativeProgress] = []
    for name, group in members.items():
        completed = sum(1 for i in group if i.status.name in completed_statuses)
        in_progress = sum(
            1 for i in group if i.status.name not in completed_statuses and is_in_progress_name(i.status.name)
        )
        out.append(
            InitiativeProgress(
                name=name,
                total=len(group),
                completed=completed,
                in_progress=in_progress,
                todo=len(group) - completed - in_progress,
                issues=tuple(group),
            )
        )
    return sorted(out, key=lambda p: (-p.total, p.name))
