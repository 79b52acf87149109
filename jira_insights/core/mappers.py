"""Mapping raw Jira issue JSON into IssueRecord / EpicRecord instances."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd

from .config import FIELD_IDS, UNASSIGNED, UNKNOWN
from .models import (
    EMPTY_DESCRIPTION,
    Description,
    EpicRecord,
    IssueLink,
    IssueRecord,
    ParentRef,
    PlainText,
    RichDocument,
)
from .status import parse_status


def parse_dt(val: Any) -> datetime | None:
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _name(block: Any, attr: str = "name") -> str | None:
    if not isinstance(block, dict):
        return None
    value = block.get(attr)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def map_description(value: Any) -> Description:
    if value is None:
        return EMPTY_DESCRIPTION
    if isinstance(value, str):
        return PlainText(value)
    if isinstance(value, (dict, list)):
        return RichDocument(value)
    return PlainText(str(value))


def _map_request_type(value: Any) -> str | None:
    # Service desk request type arrives as {"requestType": {"name": ...}}
    if isinstance(value, dict):
        request_type = value.get("requestType")
        if isinstance(request_type, dict):
            return _name(request_type)
        return _name(value) or _name(value, "value")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _map_link(raw: dict[str, Any]) -> IssueLink | None:
    link_type = _name(raw.get("type"))
    for direction, attr in (("outward", "outwardIssue"), ("inward", "inwardIssue")):
        target = raw.get(attr)
        if not isinstance(target, dict) or not target.get("key"):
            continue
        target_fields = target.get("fields") or {}
        return IssueLink(
            key=target["key"],
            summary=target_fields.get("summary") or "",
            issue_type=_name(target_fields.get("issuetype")),
            direction=direction,
            link_type=link_type,
        )
    return None


def map_links(raw_links: Any) -> tuple[IssueLink, ...]:
    if not isinstance(raw_links, list):
        return ()
    links = []
    for raw in raw_links:
        if not isinstance(raw, dict):
            continue
        link = _map_link(raw)
        if link is not None:
            links.append(link)
    return tuple(links)


def _map_parent(raw: Any) -> ParentRef | None:
    if not isinstance(raw, dict) or not raw.get("key"):
        return None
    parent_fields = raw.get("fields") or {}
    return ParentRef(
        key=raw["key"],
        summary=parent_fields.get("summary") or "",
        issue_type=_name(parent_fields.get("issuetype")),
    )


def _project_key(fields: dict[str, Any], issue_key: str | None) -> str:
    project = _name(fields.get("project"), "key")
    if project:
        return project
    if issue_key and "-" in issue_key:
        return issue_key.split("-", 1)[0]
    return ""


def _estimate_seconds(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def map_issue(raw: dict[str, Any]) -> IssueRecord:
    """Map one search result into an :class:`IssueRecord`.

    Missing or malformed fields never raise; they fall back to the sentinel
    values documented on :class:`IssueRecord`.
    """
    fields = raw.get("fields") or {}
    key = raw.get("key") or UNKNOWN
    components = tuple(
        name for name in (_name(c) for c in fields.get("components") or [] if isinstance(c, dict)) if name
    )
    short_name = fields.get(FIELD_IDS["project_short_name"])
    return IssueRecord(
        key=key,
        created=parse_dt(fields.get("created")),
        resolved=parse_dt(fields.get("resolutiondate")),
        status=parse_status(fields.get("status")),
        issue_type=_name(fields.get("issuetype")) or UNKNOWN,
        priority=_name(fields.get("priority")) or UNKNOWN,
        assignee=_name(fields.get("assignee"), "displayName"),
        reporter=_name(fields.get("reporter"), "displayName"),
        summary=fields.get("summary") or "",
        description=map_description(fields.get("description")),
        project_key=_project_key(fields, raw.get("key")),
        parent=_map_parent(fields.get("parent")),
        links=map_links(fields.get("issuelinks")),
        original_estimate_seconds=_estimate_seconds(fields.get("timeoriginalestimate")),
        components=components,
        labels=tuple(str(label) for label in fields.get("labels") or [] if label),
        request_type=_map_request_type(fields.get(FIELD_IDS["request_type"])),
        short_name=str(short_name).strip() if isinstance(short_name, str) and short_name.strip() else None,
    )


def map_epic(raw: dict[str, Any]) -> EpicRecord:
    fields = raw.get("fields") or {}
    return EpicRecord(
        key=raw.get("key") or UNKNOWN,
        summary=fields.get("summary") or "",
        project_key=_project_key(fields, raw.get("key")),
        links=map_links(fields.get("issuelinks")),
    )


def issues_to_dataframe(issues: Iterable[IssueRecord]) -> pd.DataFrame:
    rows = []
    for i in issues:
        rows.append(
            {
                "key": i.key,
                "summary": i.summary,
                "created": i.created,
                "resolved": i.resolved,
                "status": i.status.name,
                "status_category": i.status.category.value,
                "issuetype": i.issue_type,
                "priority": i.priority,
                "assignee": i.assignee or UNASSIGNED,
                "reporter": i.reporter or UNKNOWN,
                "project": i.project_key,
                "request_type": i.request_type or UNKNOWN,
            }
        )
    df = pd.DataFrame(
        rows,
        columns=[
            "key",
            "summary",
            "created",
            "resolved",
            "status",
            "status_category",
            "issuetype",
            "priority",
            "assignee",
            "reporter",
            "project",
            "request_type",
        ],
    )
    for col in ("created", "resolved"):
        df[col] = pd.to_datetime(df[col], utc=True, errors="coerce")
    return df
