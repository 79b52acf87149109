from datetime import datetime

import pytz

from jira_insights.analytics.text.classifier import MatchMode, Rule, categorize, classify
from jira_insights.analytics.text.rules import APPLICATION_RULES, ROOT_CAUSE_RULES

RULES = (
    Rule.keywords("Network", "vpn", "dns"),
    Rule.keywords("Access", "access", "permission"),
    Rule(r"\bad\b", "Active Directory"),
)


def test_word_boundary_prevents_substring_match():
    assert classify("please add me to the group", RULES, MatchMode.ALL_MATCHES) == frozenset()
    assert classify("AD account locked", RULES, MatchMode.ALL_MATCHES) == {"Active Directory"}


def test_keyword_rules_do_not_match_inside_words():
    labels = classify("Please add the loader", APPLICATION_RULES, MatchMode.ALL_MATCHES)
    assert "Active Directory" not in labels


def test_first_match_returns_single_earliest_label():
    text = "VPN access denied for AD user"
    labels = classify(text, RULES, MatchMode.FIRST_MATCH)
    assert labels == {"Network"}


def test_first_match_unmatched_is_other():
    assert classify("printer jam", RULES, MatchMode.FIRST_MATCH) == {"Other"}
    assert classify(None, RULES, MatchMode.FIRST_MATCH) == {"Other"}


def test_all_matches_returns_every_label_regardless_of_order():
    text = "VPN access denied for AD user"
    forward = classify(text, RULES, MatchMode.ALL_MATCHES)
    backward = classify(text, tuple(reversed(RULES)), MatchMode.ALL_MATCHES)
    assert forward == backward == {"Network", "Access", "Active Directory"}


def test_multi_word_keywords_allow_flexible_whitespace():
    rule = Rule.keywords("Azure DevOps", "azure devops")
    assert rule.matches("broken in Azure   DevOps today")
    assert not rule.matches("azuredevops")


def test_categorize_counts_and_examples(make_issue):
    base = pytz.UTC.localize(datetime(2024, 5, 1))
    issues = [
        make_issue("DTI-1", summary="VPN down", created=base),
        make_issue("DTI-2", summary="DNS not resolving", created=base.replace(day=3)),
        make_issue("DTI-3", summary="vpn again", created=base.replace(day=2)),
        make_issue("DTI-4", summary="Need access", created=base.replace(day=4)),
        make_issue("DTI-5", summary="printer", created=base.replace(day=5)),
    ]
    buckets = categorize(issues, RULES, MatchMode.FIRST_MATCH, max_examples=2)
    assert [(b.label, b.count) for b in buckets] == [("Network", 3), ("Access", 1), ("Other", 1)]
    assert [e.key for e in buckets[0].examples] == ["DTI-2", "DTI-3"]
    assert buckets[0].to_dict()["examples"][0] == {"key": "DTI-2", "summary": "DNS not resolving"}


def test_categorize_multi_label_counts_issue_per_label(make_issue):
    issues = [make_issue("DTI-1", summary="Jenkins build on AWS")]
    buckets = categorize(issues, APPLICATION_RULES, MatchMode.ALL_MATCHES)
    assert {b.label for b in buckets} == {"Jenkins", "AWS"}
    assert all(b.count == 1 for b in buckets)


def test_root_cause_table_is_first_match(make_issue):
    issues = [make_issue("DTI-1", summary="Pipeline failed during deployment")]
    buckets = categorize(issues, ROOT_CAUSE_RULES, MatchMode.FIRST_MATCH)
    assert len(buckets) == 1
    assert buckets[0].label == "Build / Pipeline Failure"
