"""Keyword classification of issue text into labels.

A rule table is an ordered sequence of :class:`Rule` objects. Patterns are
regular expressions matched case-insensitively; :meth:`Rule.keywords` wraps
plain words in word boundaries so a short token such as ``ad`` never matches
inside ``add`` or ``load``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from jira_insights.core.config import DEFAULT_MAX_EXAMPLES, OTHER_LABEL
from jira_insights.core.models import IssueRecord


class MatchMode(Enum):
    FIRST_MATCH = "first"
    ALL_MATCHES = "all"


@dataclass(slots=True, frozen=True)
class Rule:
    pattern: str
    label: str
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "regex", re.compile(self.pattern, re.IGNORECASE))

    @classmethod
    def keywords(cls, label: str, *words: str) -> Rule:
        alternation = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in words)
        return cls(rf"\b(?:{alternation})\b", label)

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


@dataclass(slots=True, frozen=True)
class IssueRef:
    key: str
    summary: str

    def to_dict(self) -> dict:
        return {"key": self.key, "summary": self.summary}


@dataclass(slots=True, frozen=True)
class CategoryBucket:
    label: str
    count: int
    examples: tuple[IssueRef, ...] = ()

    def to_dict(self) -> dict:
        return {"name": self.label, "count": self.count, "examples": [e.to_dict() for e in self.examples]}


def classify(text: str | None, rules: Sequence[Rule], mode: MatchMode) -> frozenset[str]:
    """Labels of the rules matching ``text``.

    ``FIRST_MATCH`` returns exactly one label: the earliest matching rule, or
    ``"Other"`` when nothing matches. ``ALL_MATCHES`` returns every matching
    label and may be empty.
    """
    content = text or ""
    if mode is MatchMode.FIRST_MATCH:
        for rule in rules:
            if rule.matches(content):
                return frozenset({rule.label})
        return frozenset({OTHER_LABEL})
    return frozenset(rule.label for rule in rules if rule.matches(content))


def _newest_first(issues: Iterable[IssueRecord]) -> list[IssueRecord]:
    dated = [i for i in issues if i.created is not None]
    undated = [i for i in issues if i.created is None]
    return sorted(dated, key=lambda i: i.created, reverse=True) + undated


def categorize(
    issues: Sequence[IssueRecord],
    rules: Sequence[Rule],
    mode: MatchMode,
    *,
    max_examples: int = DEFAULT_MAX_EXAMPLES,
) -> list[CategoryBucket]:
    """Tally labels across ``issues`` with up to ``max_examples`` recent examples each.

    Buckets are sorted by count (descending) then label.
    """
    members: dict[str, list[IssueRecord]] = {}
    for issue in _newest_first(issues):
        for label in classify(issue.text, rules, mode):
            members.setdefault(label, []).append(issue)
    buckets = [
        CategoryBucket(
            label=label,
            count=len(matched),
            examples=tuple(IssueRef(i.key, i.summary) for i in matched[: max(max_examples, 0)]),
        )
        for label, matched in members.items()
    ]
    return sorted(buckets, key=lambda b: (-b.count, b.label))
