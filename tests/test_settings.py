import logging

from jira_insights.analytics.text.classifier import MatchMode, classify
from jira_insights.core.settings import DEFAULT_SETTINGS, load_settings


def test_missing_file_returns_defaults(tmp_path):
    assert load_settings(tmp_path) is DEFAULT_SETTINGS


def test_yaml_overrides(tmp_path):
    (tmp_path / "insights.yaml").write_text(
        """
timezone: Europe/London
capacity:
  service_projects: [OPS]
estimates:
  todo_hours: 16
classifier:
  max_examples: 1
  root_causes:
    - label: Printer
      keywords: [printer, toner]
  request_subcategories:
    Access Request:
      - label: VPN
        pattern: '\\bvpn\\b'
"""
    )
    settings = load_settings(tmp_path)
    assert settings.timezone == "Europe/London"
    assert settings.service_projects == frozenset({"OPS"})
    assert settings.initiative_project == "TI"
    assert settings.estimate_rules.todo_hours == 16.0
    assert settings.estimate_rules.in_progress_hours == 4.0
    assert settings.max_examples == 1
    assert classify("Toner empty", settings.root_cause_rules, MatchMode.FIRST_MATCH) == {"Printer"}
    assert classify("vpn access", settings.subcategory_rules("Access Request"), MatchMode.FIRST_MATCH) == {"VPN"}
    # untouched tables keep their defaults
    assert settings.application_rules == DEFAULT_SETTINGS.application_rules
    assert settings.subcategory_rules("Incident") == DEFAULT_SETTINGS.subcategory_rules("Incident")


def test_invalid_yaml_falls_back_with_warning(tmp_path, caplog):
    (tmp_path / "insights.yaml").write_text("classifier: [unclosed")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(tmp_path)
    assert settings is DEFAULT_SETTINGS
    assert "Ignoring invalid settings file" in caplog.text


def test_rule_without_keywords_is_rejected(tmp_path, caplog):
    (tmp_path / "insights.yaml").write_text("classifier:\n  root_causes:\n    - label: Empty\n")
    with caplog.at_level(logging.WARNING):
        assert load_settings(tmp_path) is DEFAULT_SETTINGS


def test_single_name_string_counts_as_one_item(tmp_path):
    (tmp_path / "insights.yaml").write_text(
        "capacity:\n  service_projects: DTI\nestimates:\n  qualifying_projects: OPS\n  qualifying_types: Story\n"
    )
    settings = load_settings(tmp_path)
    assert settings.service_projects == frozenset({"DTI"})
    assert settings.estimate_rules.qualifying_projects == frozenset({"OPS"})
    assert settings.estimate_rules.qualifying_types == frozenset({"Story"})


def test_non_list_names_are_rejected(tmp_path, caplog):
    (tmp_path / "insights.yaml").write_text("capacity:\n  service_projects: {DTI: yes}\n")
    with caplog.at_level(logging.WARNING):
        assert load_settings(tmp_path) is DEFAULT_SETTINGS
    assert "expected a list of names" in caplog.text


def test_unknown_timezone_falls_back_with_warning(tmp_path, caplog):
    (tmp_path / "insights.yaml").write_text("timezone: Mars/Olympus\n")
    with caplog.at_level(logging.WARNING):
        settings = load_settings(tmp_path)
    assert settings is DEFAULT_SETTINGS
    assert "Mars/Olympus" in caplog.text
