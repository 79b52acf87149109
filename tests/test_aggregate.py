from datetime import datetime, timedelta

import pytz

from jira_insights.analytics.metrics.aggregate import aggregate, throughput_per_week
from jira_insights.analytics.metrics.derived import percentage, round_half_up

BASE = pytz.UTC.localize(datetime(2024, 3, 1, 9, 0))


def _sample(make_issue):
    return [
        make_issue("DEV-1", "Done", priority="High", issue_type="Bug", assignee="Alice",
                   created=BASE, resolved=BASE + timedelta(days=2, hours=23)),
        make_issue("DEV-2", "Done", priority="Low", issue_type="Task", assignee="Alice",
                   created=BASE, resolved=BASE + timedelta(days=3)),
        make_issue("DEV-3", "In Progress", priority="High", issue_type="Task", created=BASE),
        make_issue("DEV-4", "To Do", issue_type="Task"),
    ]


def test_counts_use_sentinels(make_issue):
    metrics = aggregate(_sample(make_issue))
    assert metrics.total_issues == 4
    assert metrics.by_status == {"Done": 2, "In Progress": 1, "To Do": 1}
    assert metrics.by_type == {"Task": 3, "Bug": 1}
    assert metrics.by_priority == {"High": 2, "Low": 1, "Unknown": 1}
    assert metrics.by_assignee == {"Alice": 2, "Unassigned": 2}


def test_durations_floor_then_round_half_up(make_issue):
    # 2 days 23h floors to 2, exactly 3 days stays 3; mean 2.5 rounds to 3
    metrics = aggregate(_sample(make_issue))
    assert metrics.resolved_issues == 2
    assert metrics.avg_cycle_time_days == 3
    assert metrics.avg_lead_time_days == 3


def test_empty_collection_is_all_zero():
    metrics = aggregate([])
    assert metrics.total_issues == 0
    assert metrics.by_status == {}
    assert metrics.avg_cycle_time_days == 0
    assert metrics.avg_lead_time_days == 0


def test_throughput_per_week():
    assert throughput_per_week(10, 30) == 2
    assert throughput_per_week(1, 2) == 4
    assert throughput_per_week(5, 0) == 0


def test_percentage_edges():
    assert percentage(3, 3) == 100
    assert percentage(5, 0) == 0
    assert percentage(1, 3) == 33
    assert percentage(1, 8) == 13


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.25, 1) == 0.3
