"""Load report settings from YAML (with fallbacks to the built-in defaults).

An optional ``insights.yaml`` overrides rule tables and capacity constants::

    timezone: Europe/London
    capacity:
      service_projects: [DTI]
      initiative_project: TI
      initiative_issue_type: Initiative
    estimates:
      qualifying_projects: [DTI]
      qualifying_types: [Story, Task]
      todo_hours: 8
      in_progress_hours: 4
    classifier:
      max_examples: 3
      root_causes:
        - label: Build / Pipeline Failure
          keywords: [build, pipeline]
        - label: Active Directory
          pattern: '\\bad\\b'
      applications: [...]
      request_subcategories:
        Access Request: [...]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytz
import yaml

from jira_insights.analytics.capacity.estimates import DEFAULT_ESTIMATE_RULES, EstimateRules
from jira_insights.analytics.text.classifier import Rule
from jira_insights.analytics.text.rules import (
    APPLICATION_RULES,
    DEFAULT_SUBCATEGORY_RULES,
    REQUEST_SUBCATEGORY_RULES,
    ROOT_CAUSE_RULES,
)

from .config import (
    DEFAULT_MAX_EXAMPLES,
    INITIATIVE_ISSUE_TYPE,
    INITIATIVE_PROJECT,
    SERVICE_REQUEST_PROJECTS,
    TIMEZONE,
)

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "insights.yaml"


@dataclass(slots=True, frozen=True)
class InsightSettings:
    timezone: str = TIMEZONE
    service_projects: frozenset[str] = SERVICE_REQUEST_PROJECTS
    initiative_project: str = INITIATIVE_PROJECT
    initiative_issue_type: str = INITIATIVE_ISSUE_TYPE
    estimate_rules: EstimateRules = DEFAULT_ESTIMATE_RULES
    root_cause_rules: Sequence[Rule] = ROOT_CAUSE_RULES
    application_rules: Sequence[Rule] = APPLICATION_RULES
    request_subcategory_rules: Mapping[str, Sequence[Rule]] = field(
        default_factory=lambda: dict(REQUEST_SUBCATEGORY_RULES)
    )
    default_subcategory_rules: Sequence[Rule] = DEFAULT_SUBCATEGORY_RULES
    max_examples: int = DEFAULT_MAX_EXAMPLES

    def subcategory_rules(self, request_type: str) -> Sequence[Rule]:
        return self.request_subcategory_rules.get(request_type, self.default_subcategory_rules)


DEFAULT_SETTINGS = InsightSettings()


def parse_rules(entries: Any) -> tuple[Rule, ...]:
    """Build a rule table from a list of ``{label, keywords | pattern}`` mappings."""
    if not isinstance(entries, list):
        raise ValueError("rule table must be a list")
    rules = []
    for entry in entries:
        label = entry.get("label")
        if not label:
            raise ValueError(f"rule without label: {entry!r}")
        if entry.get("pattern"):
            rules.append(Rule(str(entry["pattern"]), str(label)))
        else:
            keywords = [str(k) for k in entry.get("keywords") or []]
            if not keywords:
                raise ValueError(f"rule {label!r} needs keywords or a pattern")
            rules.append(Rule.keywords(str(label), *keywords))
    return tuple(rules)


def _names(value: Any, default: frozenset[str]) -> frozenset[str]:
    """A YAML list of names; a bare string counts as a single name."""
    if not value:
        return default
    if isinstance(value, str):
        return frozenset({value})
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of names, got {value!r}")
    return frozenset(str(v) for v in value)


def settings_from_mapping(data: Mapping[str, Any]) -> InsightSettings:
    timezone = str(data.get("timezone") or TIMEZONE)
    pytz.timezone(timezone)
    capacity = data.get("capacity") or {}
    estimates = data.get("estimates") or {}
    classifier = data.get("classifier") or {}
    base = DEFAULT_ESTIMATE_RULES

    estimate_rules = EstimateRules(
        qualifying_projects=_names(estimates.get("qualifying_projects"), base.qualifying_projects),
        qualifying_types=_names(estimates.get("qualifying_types"), base.qualifying_types),
        todo_hours=float(estimates.get("todo_hours", base.todo_hours)),
        in_progress_hours=float(estimates.get("in_progress_hours", base.in_progress_hours)),
    )
    subcategories = dict(REQUEST_SUBCATEGORY_RULES)
    for request_type, entries in (classifier.get("request_subcategories") or {}).items():
        subcategories[str(request_type)] = parse_rules(entries)

    def rules_or_default(name: str, default: Sequence[Rule]) -> Sequence[Rule]:
        entries = classifier.get(name)
        return parse_rules(entries) if entries else default

    return InsightSettings(
        timezone=timezone,
        service_projects=_names(capacity.get("service_projects"), SERVICE_REQUEST_PROJECTS),
        initiative_project=str(capacity.get("initiative_project") or INITIATIVE_PROJECT),
        initiative_issue_type=str(capacity.get("initiative_issue_type") or INITIATIVE_ISSUE_TYPE),
        estimate_rules=estimate_rules,
        root_cause_rules=rules_or_default("root_causes", ROOT_CAUSE_RULES),
        application_rules=rules_or_default("applications", APPLICATION_RULES),
        request_subcategory_rules=subcategories,
        default_subcategory_rules=rules_or_default("default_subcategories", DEFAULT_SUBCATEGORY_RULES),
        max_examples=int(classifier.get("max_examples", DEFAULT_MAX_EXAMPLES)),
    )


def load_settings(base_path: str | Path | None = None, filename: str = SETTINGS_FILENAME) -> InsightSettings:
    base = Path(base_path or Path.cwd())
    yaml_path = base / filename
    if not yaml_path.exists():
        return DEFAULT_SETTINGS
    try:
        data = yaml.safe_load(yaml_path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError("top-level YAML value must be a mapping")
        return settings_from_mapping(data)
    except (
        OSError,
        yaml.YAMLError,
        re.error,
        pytz.UnknownTimeZoneError,
        AttributeError,
        TypeError,
        ValueError,
    ) as exc:
        logger.warning("Ignoring invalid settings file %s: %s", yaml_path, exc)
        return DEFAULT_SETTINGS
