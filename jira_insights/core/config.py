"""Central configuration, constants, and tuning knobs for report computation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Jira Connection Settings
# =============================================================================
TIMEZONE = "UTC"  # Day boundaries for every daily series are taken in this zone
SEARCH_PAGE_SIZE = 100

# =============================================================================
# JQL Filters
# =============================================================================
# Projects that make up the engineering scope of the statistics reports
DEFAULT_PROJECTS: Sequence[str] = ("DevOps", "TechOps", "Technology Group")

# Service desk project and the team field used to narrow it
SERVICE_DESK_PROJECT = "DTI"
TEAM_FIELD = '"Team[Team]"'

# Team ids (Atlassian team UUIDs) included from the service desk project
DEVOPS_TEAM_ID = "9b7aba3a-a76b-46b8-8a3b-658baad7c1a3"
SERVICE_DESK_TEAM_IDS: Sequence[str] = (
    DEVOPS_TEAM_ID,
    "a092fa48-f541-4358-90b8-ba6caccceb72",
    "9888ca76-8551-47b3-813f-4bf5df9e9762",
)
SCOPE_TEAM_IDS: Sequence[str] = ("01c3b859-1307-41e3-8a88-24c701dd1713", *SERVICE_DESK_TEAM_IDS)

# Projects searched for initiative short names, and the project whose
# components name technology initiatives
INITIATIVE_SCOPE_PROJECTS: Sequence[str] = ("DTI", "DevOps", "Technology Group", "TechOps")
TECHNOLOGY_PROJECT = "Technology Group"
SHORT_NAME_JQL_FIELD = '"Project Short Name[Short text]"'

# =============================================================================
# Result Caps
# =============================================================================
# Hard ceilings on records pulled per paginated query. They bound latency of
# a single report; reports are recomputed from scratch on every call.
DEFAULT_HARD_CAP = 1000
TREND_HARD_CAP = 5000
CAPACITY_HARD_CAP = 5000
EPIC_BATCH_SIZE = 50

# =============================================================================
# Sentinels for missing fields
# =============================================================================
UNKNOWN = "Unknown"
UNASSIGNED = "Unassigned"
OTHER_LABEL = "Other"

# =============================================================================
# Jira Custom Field IDs
# =============================================================================
FIELD_IDS = {
    "project_short_name": "customfield_10574",
    "request_type": "customfield_10010",
}

# Canonical field lists per report. Field names are passed through to the
# search call so each report only pulls what it reads.
STATISTICS_FIELDS: Sequence[str] = (
    "status",
    "issuetype",
    "priority",
    "assignee",
    "created",
    "resolutiondate",
)
PERFORMANCE_FIELDS: Sequence[str] = ("status", "assignee", "created", "resolutiondate", "updated")
TREND_FIELDS: Sequence[str] = ("summary", "status", "created", "resolutiondate", "priority", "issuetype")
AGE_FIELDS: Sequence[str] = ("summary", "status", "created", "priority")
ANALYTICS_FIELDS: Sequence[str] = (
    "summary",
    "description",
    "status",
    "issuetype",
    "priority",
    "assignee",
    "reporter",
    "created",
    "resolutiondate",
    FIELD_IDS["request_type"],
)
CAPACITY_FIELDS: Sequence[str] = (
    "summary",
    "status",
    "issuetype",
    "priority",
    "assignee",
    "created",
    "resolutiondate",
    "project",
    "parent",
    "issuelinks",
    "timeoriginalestimate",
)
EPIC_FIELDS: Sequence[str] = ("summary", "project", "issuetype", "issuelinks")
INITIATIVE_FIELDS: Sequence[str] = ("summary", "status", "issuetype")
SHORT_NAME_FIELDS: Sequence[str] = ("summary", "status", FIELD_IDS["project_short_name"])
COMPONENT_FIELDS: Sequence[str] = ("summary", "status", "components")

# =============================================================================
# Issue Type Configuration
# =============================================================================
INCIDENT_ISSUE_TYPES: frozenset[str] = frozenset(
    {
        "[System] Incident",
        "[System] Problem",
        "Build Issue",
    }
)

# Statuses counted as completed in initiative progress reports
COMPLETED_STATUSES: frozenset[str] = frozenset({"Done", "Closed", "Resolved", "Canceled"})

# =============================================================================
# Capacity Planning
# =============================================================================
SERVICE_REQUEST_PROJECTS: frozenset[str] = frozenset({"DTI"})
SERVICE_REQUESTS_GROUP = "Service Requests"
INITIATIVE_PROJECT = "TI"
INITIATIVE_ISSUE_TYPE = "Initiative"

BUCKET_BAU = "BAU"
BUCKET_IMPROVE = "Improve"
BUCKET_DELIVER = "Deliver"
CAPACITY_BUCKETS: Sequence[str] = (BUCKET_BAU, BUCKET_IMPROVE, BUCKET_DELIVER)

# Default hour estimates for issues without an original estimate. These
# values have changed between planning cycles; override them per deployment
# through insights.yaml rather than editing the resolver.
ESTIMATE_QUALIFYING_PROJECTS: frozenset[str] = frozenset({"DTI"})
ESTIMATE_QUALIFYING_TYPES: frozenset[str] = frozenset({"Story", "Task"})
DEFAULT_TODO_ESTIMATE_HOURS = 8.0
DEFAULT_IN_PROGRESS_ESTIMATE_HOURS = 4.0

SECONDS_PER_HOUR = 3600

# =============================================================================
# Report Defaults
# =============================================================================
DEFAULT_TREND_DAYS = 90
DEFAULT_AGE_DAYS = 30
DEFAULT_PERFORMANCE_DAYS = 30
DEFAULT_ANALYTICS_DAYS = 30
DEFAULT_CAPACITY_DAYS = 30
DEFAULT_MAX_EXAMPLES = 3
DEFAULT_TOP_N = 10
FETCH_MAX_WORKERS = 4


@dataclass(slots=True)
class AppSettings:
    page_size: int = SEARCH_PAGE_SIZE
    max_workers: int = FETCH_MAX_WORKERS


SETTINGS = AppSettings()
