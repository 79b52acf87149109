from datetime import datetime, timedelta

import pytz

from jira_insights.analytics.capacity.workload import build_assignee_workload

NOW = pytz.UTC.localize(datetime(2024, 6, 30, 12, 0))


def _ago(days):
    return NOW - timedelta(days=days)


def test_rows_sorted_by_hours_then_ticket_count(make_issue):
    issues = [
        make_issue("DTI-1", "To Do", issue_type="Service Request", assignee="Alice", priority="High", created=_ago(10)),
        make_issue("DEV-2", "To Do", issue_type="Bug", assignee="Alice", priority="High",
                   original_estimate_seconds=36000, created=_ago(4)),
        make_issue("DEV-3", "In Progress", issue_type="Story", assignee="Bob", priority="Low", created=_ago(2)),
        make_issue("DEV-4", "To Do", issue_type="Story", assignee="Bob", priority="High", created=_ago(1)),
        make_issue("OPS-5", "To Do", issue_type="Bug", created=_ago(30)),
        make_issue("OPS-6", "To Do", issue_type="Bug", assignee="Carol", original_estimate_seconds=18 * 3600,
                   created=_ago(5)),
    ]
    rows = build_assignee_workload(issues, NOW)
    assert [r.assignee_name for r in rows] == ["Alice", "Carol", "Bob", "Unassigned"]

    alice = rows[0]
    assert alice.open_ticket_count == 2
    assert alice.hours_by_estimate == 10.0
    assert alice.hours_by_guess == 8.0
    assert alice.oldest_age_days == 10
    assert alice.average_age_days == 7.0
    assert alice.counts_by_priority == {"High": 2}

    bob = rows[2]
    assert bob.total_hours == 12.0
    assert bob.counts_by_priority == {"Low": 1, "High": 1}

    unassigned = rows[3]
    assert unassigned.total_hours == 0.0
    assert unassigned.oldest_age_days == 30


def test_to_dict_keys(make_issue):
    rows = build_assignee_workload([make_issue("DTI-1", assignee="Alice", created=_ago(3))], NOW)
    assert rows[0].to_dict() == {
        "name": "Alice",
        "openTickets": 1,
        "estimatedHours": 0.0,
        "guessedHours": 8.0,
        "totalHours": 8.0,
        "oldestTicket": 3,
        "avgAge": 3.0,
        "byPriority": {"Unknown": 1},
    }


def test_empty_input():
    assert build_assignee_workload([], NOW) == []
