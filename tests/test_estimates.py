from jira_insights.analytics.capacity.estimates import EstimateRules, default_hours, explicit_hours


def test_service_project_todo_gets_todo_default(make_issue):
    issue = make_issue("DTI-1", "To Do", issue_type="Service Request")
    assert default_hours(issue) == 8.0


def test_in_progress_gets_smaller_default(make_issue):
    assert default_hours(make_issue("OPS-1", "In Progress", issue_type="Story")) == 4.0


def test_done_and_unknown_categories_get_zero(make_issue):
    assert default_hours(make_issue("DTI-1", "Done", issue_type="Task")) == 0.0
    assert default_hours(make_issue("DTI-2", "Weird", issue_type="Task")) == 0.0


def test_non_qualifying_issue_gets_zero(make_issue):
    assert default_hours(make_issue("OPS-1", "To Do", issue_type="Bug")) == 0.0


def test_explicit_estimate_wins(make_issue):
    issue = make_issue("DTI-1", "To Do", issue_type="Task", original_estimate_seconds=5400)
    assert explicit_hours(issue) == 1.5
    assert default_hours(issue) == 0.0


def test_custom_rules(make_issue):
    rules = EstimateRules(
        qualifying_projects=frozenset({"OPS"}), qualifying_types=frozenset(), todo_hours=16, in_progress_hours=2
    )
    assert default_hours(make_issue("OPS-1", "To Do", issue_type="Bug"), rules) == 16.0
    assert default_hours(make_issue("DTI-1", "To Do", issue_type="Task"), rules) == 0.0
