"""Domain data models for issues, epics, initiatives, and search pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .config import UNASSIGNED, UNKNOWN

# Atlassian Document Format nodes that end a line of text
_BLOCK_NODES = frozenset(
    {"paragraph", "heading", "listItem", "bulletList", "orderedList", "codeBlock", "blockquote", "tableRow"}
)


class StatusCategory(Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"
    UNKNOWN = UNKNOWN


@dataclass(slots=True, frozen=True)
class IssueStatus:
    name: str = UNKNOWN
    category: StatusCategory = StatusCategory.UNKNOWN


@dataclass(slots=True, frozen=True)
class PlainText:
    text: str = ""

    def to_text(self) -> str:
        return self.text


@dataclass(slots=True, frozen=True)
class RichDocument:
    """A rich-text (ADF) description kept as the raw document tree."""

    document: Any

    def to_text(self) -> str:
        return _flatten_adf(self.document).strip()


Description = PlainText | RichDocument

EMPTY_DESCRIPTION = PlainText("")


def _flatten_adf(node: Any) -> str:
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(_flatten_adf(item) for item in node)
    if not isinstance(node, dict):
        return ""
    out: list[str] = []
    node_type = node.get("type")
    if node_type == "text":
        out.append(node.get("text") or "")
    elif node_type in {"mention", "emoji", "status", "inlineCard"}:
        attrs = node.get("attrs") or {}
        out.append(str(attrs.get("text") or attrs.get("url") or ""))
    elif node_type == "hardBreak":
        out.append("\n")
    for child in node.get("content") or []:
        out.append(_flatten_adf(child))
    if node_type in _BLOCK_NODES:
        out.append("\n")
    return "".join(out)


@dataclass(slots=True, frozen=True)
class ParentRef:
    key: str
    summary: str = ""
    issue_type: str | None = None


@dataclass(slots=True, frozen=True)
class IssueLink:
    key: str
    summary: str = ""
    issue_type: str | None = None
    direction: str = "outward"
    link_type: str | None = None

    @property
    def project_key(self) -> str:
        return self.key.split("-", 1)[0]


@dataclass(slots=True, frozen=True)
class IssueRecord:
    key: str
    created: datetime | None = None
    resolved: datetime | None = None
    status: IssueStatus = field(default_factory=IssueStatus)
    issue_type: str = UNKNOWN
    priority: str = UNKNOWN
    assignee: str | None = None
    reporter: str | None = None
    summary: str = ""
    description: Description = EMPTY_DESCRIPTION
    project_key: str = ""
    parent: ParentRef | None = None
    links: tuple[IssueLink, ...] = ()
    original_estimate_seconds: int | None = None
    components: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    request_type: str | None = None
    short_name: str | None = None

    @property
    def text(self) -> str:
        """Summary plus flattened description, used for keyword matching."""
        description = self.description.to_text()
        if not description:
            return self.summary
        return f"{self.summary}\n{description}"

    @property
    def assignee_name(self) -> str:
        return self.assignee or UNASSIGNED

    @property
    def is_open(self) -> bool:
        return self.status.category is not StatusCategory.DONE


@dataclass(slots=True, frozen=True)
class EpicRecord:
    key: str
    summary: str = ""
    project_key: str = ""
    links: tuple[IssueLink, ...] = ()


@dataclass(slots=True, frozen=True)
class Initiative:
    key: str
    summary: str = ""


@dataclass(slots=True, frozen=True)
class SearchPage:
    issues: list[dict[str, Any]]
    next_page_token: str | None = None
    is_last: bool = True
    total: int | None = None
