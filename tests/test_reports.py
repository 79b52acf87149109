from datetime import date, datetime, timedelta

import pytz

from jira_insights.features.capacity.context import build_capacity_report
from jira_insights.features.initiatives.context import build_initiative_progress
from jira_insights.features.open_age.context import build_open_age_report
from jira_insights.features.performance.context import build_performance_report
from jira_insights.features.service_desk.context import build_service_desk_report
from jira_insights.features.statistics.context import build_statistics_report
from jira_insights.features.trends.context import build_trends_report

START, END = date(2024, 1, 1), date(2024, 1, 14)
NOW = pytz.UTC.localize(datetime(2024, 1, 14, 12, 0))


def _at(month, day, hour=10, year=2024):
    return pytz.UTC.localize(datetime(year, month, day, hour))


def _numbers(value):
    """Every numeric leaf of a nested report dict."""
    if isinstance(value, bool):
        return
    if isinstance(value, (int, float)):
        yield value
    elif isinstance(value, dict):
        for v in value.values():
            yield from _numbers(v)
    elif isinstance(value, list):
        for v in value:
            yield from _numbers(v)


def test_empty_input_gives_zeros_everywhere():
    reports = [
        build_statistics_report([]).to_dict(),
        build_performance_report([], 0).to_dict(),
        build_trends_report([], START, END).to_dict()["resolutionMetrics"],
        build_open_age_report([], START, END, NOW).to_dict()["currentMetrics"],
        build_service_desk_report([], START, END).to_dict(),
    ]
    for report in reports:
        assert all(n == 0 for n in _numbers(report))
    capacity = build_capacity_report([], [], [], None, None, START, END, NOW).to_dict()
    summary = dict(capacity["summary"])
    assert summary.pop("period") == 14
    assert all(n == 0 for n in _numbers(summary))
    assert capacity["summary"]["velocity"] == 0
    assert capacity["summary"]["flowTrend"] == "stable"
    assert capacity["workBreakdown"] == {
        "BAU": {"tickets": 0, "totalHours": 0.0, "groups": []},
        "Improve": {"tickets": 0, "totalHours": 0.0, "groups": []},
        "Deliver": {"tickets": 0, "totalHours": 0.0, "groups": []},
    }
    trends = build_trends_report([], START, END).to_dict()
    assert len(trends["volumeData"]) == 14
    assert all(p["openTickets"] == 0 for p in trends["volumeData"])
    assert build_initiative_progress([]) == []


def test_statistics_report_keys(make_issue):
    issues = [make_issue("DEV-1", "Done", created=_at(1, 1), resolved=_at(1, 3)), make_issue("DEV-2")]
    out = build_statistics_report(issues).to_dict()
    assert out["totalIssues"] == 2
    assert out["byStatus"] == {"Done": 1, "To Do": 1}
    assert out["byAssignee"] == {"Unassigned": 2}
    assert out["avgCycleTime"] == 2
    assert out["avgLeadTime"] == 2


def test_performance_report(make_issue):
    issues = [
        make_issue("DEV-1", "Done", created=_at(1, 1), resolved=_at(1, 2)),
        make_issue("DEV-2", "Done", created=_at(1, 1), resolved=_at(1, 4)),
        make_issue("DEV-3", "In Progress", created=_at(1, 5)),
        make_issue("DEV-4", created=_at(1, 6)),
    ]
    out = build_performance_report(issues, 7).to_dict()
    assert out["throughput"] == 2
    assert out["resolvedIssues"] == 2
    assert out["inProgressIssues"] == 1
    assert out["totalIssues"] == 4
    assert out["avgCycleTime"] == 2
    assert out["periodDays"] == 7


def test_trends_report(make_issue):
    issues = [
        make_issue("DTI-1", "Done", issue_type="[System] Incident", priority="High",
                   created=_at(1, 2), resolved=_at(1, 2, 16)),
        make_issue("DTI-2", "Done", issue_type="Task", created=_at(1, 3), resolved=_at(1, 5)),
        make_issue("DTI-3", "To Do", created=_at(12, 20, year=2023)),
    ]
    out = build_trends_report(issues, START, END).to_dict()
    metrics = out["resolutionMetrics"]
    assert metrics["totalCreated"] == 2
    assert metrics["totalResolved"] == 2
    assert metrics["resolutionRate"] == 100
    assert metrics["incidentCount"] == 1
    assert metrics["avgIncidentResolutionTimeHours"] == 6.0
    assert metrics["avgIncidentResolutionTimeDays"] == 0.3
    assert out["statusBreakdown"] == {"Done": 2, "To Do": 1}
    assert out["priorityBreakdown"] == {"High": 1, "Unknown": 2}
    assert out["periodDays"] == 14
    volume = {p["date"]: p for p in out["volumeData"]}
    assert volume["2024-01-01"]["openTickets"] == 1
    assert volume["2024-01-03"]["openTickets"] == 2
    assert volume["2024-01-05"]["openTickets"] == 1


def test_open_age_report(make_issue):
    issues = [
        make_issue("DEV-1", created=NOW - timedelta(days=20)),
        make_issue("DEV-2", "In Progress", created=NOW - timedelta(days=4)),
        make_issue("DEV-3", "Done", created=NOW - timedelta(days=40), resolved=NOW),
    ]
    out = build_open_age_report(issues, START, END, NOW).to_dict()
    assert out["currentMetrics"] == {"avgAge": 12.0, "totalOpen": 2, "oldestTicketAge": 20}
    assert out["statusBreakdown"] == {"To Do": 1, "In Progress": 1}
    assert out["trendData"][0] == {"date": "2024-01-01", "avgAge": 7.5, "openCount": 1}
    assert out["trendData"][-1]["openCount"] == 2


def _service_desk_issues(make_issue):
    return [
        make_issue("DTI-1", "Done", issue_type="[System] Incident", request_type="Incident", assignee="Alice",
                   summary="Pipeline broken on Jenkins", created=_at(1, 2), resolved=_at(1, 3)),
        make_issue("DTI-2", "In Progress", issue_type="[System] Incident", request_type="Incident",
                   assignee="Alice", summary="VPN outage", created=_at(1, 4)),
        make_issue("DTI-3", issue_type="Service Request", request_type="Access Request", assignee="Bob",
                   summary="Need access to GitHub repo", created=_at(1, 5)),
        make_issue("DTI-4", issue_type="Task", summary="Printer jam", created=_at(1, 6)),
    ]


def test_service_desk_report(make_issue):
    out = build_service_desk_report(_service_desk_issues(make_issue), START, END).to_dict()
    assert out["totalTickets"] == 4
    assert out["resolutionRate"] == 25
    assert out["totalResolvedInPeriod"] == 1
    assert out["avgResolutionTimeDays"] == 1.0
    assert out["allCounts"]["issueTypes"] == {"[System] Incident": 2, "Service Request": 1, "Task": 1}
    assert out["topAssignees"] == [
        {"name": "Alice", "count": 2},
        {"name": "Bob", "count": 1},
        {"name": "Unassigned", "count": 1},
    ]
    assert out["topRequestTypes"][0] == {"name": "Incident", "count": 2}
    assert {a["name"] for a in out["topApplications"]} == {"Jenkins", "VPN", "GitHub"}

    incidents = out["incidentAnalysis"]
    assert incidents["totalIncidents"] == 2
    assert [(c["category"], c["count"], c["percentage"]) for c in incidents["rootCauses"]] == [
        ("Build / Pipeline Failure", 1, 50),
        ("Network / Connectivity", 1, 50),
    ]
    assert incidents["rootCauses"][0]["examples"] == [{"key": "DTI-1", "summary": "Pipeline broken on Jenkins"}]

    breakdown = out["requestTypeBreakdown"]
    assert list(breakdown) == ["Incident", "Access Request", "Unknown"]
    assert breakdown["Incident"]["total"] == 2
    assert [s["name"] for s in breakdown["Incident"]["subCategories"]] == ["Other", "Outage"]
    assert breakdown["Access Request"]["subCategories"][0]["name"] == "Repository Access"
    assert breakdown["Unknown"]["subCategories"][0]["name"] == "Other"


def test_capacity_report(make_issue):
    open_issue = make_issue("DTI-1", issue_type="Service Request", assignee="Alice", created=_at(1, 3))
    flowed = make_issue("DEV-2", "Done", issue_type="Task", created=_at(1, 4), resolved=_at(1, 6))
    old = make_issue("OPS-3", "Done", created=_at(12, 1, year=2023), resolved=_at(1, 5))
    report = build_capacity_report([open_issue], [open_issue, flowed], [flowed, old], {}, {}, START, END, NOW)
    out = report.to_dict()

    summary = out["summary"]
    assert summary == {
        "totalOpenTickets": 1,
        "ticketsCreated": 2,
        "ticketsResolved": 2,
        "avgResolutionTime": 18.5,
        "velocity": 1,
        "netFlow": 0,
        "flowTrend": "stable",
        "period": 14,
    }
    flow = {p["date"]: p for p in out["ticketFlow"]}
    assert len(flow) == 14
    assert flow["2024-01-04"] == {"date": "2024-01-04", "created": 1, "resolved": 0}
    assert flow["2024-01-05"]["resolved"] == 1
    assert out["assigneeWorkload"][0]["name"] == "Alice"
    assert out["workBreakdown"]["BAU"]["tickets"] == 1
    assert out["workBreakdown"]["BAU"]["totalHours"] == 8.0
    assert out["workBreakdown"]["BAU"]["groups"][0]["name"] == "Service Requests"


def test_capacity_flow_keeps_records_without_keys(make_issue):
    first = make_issue("Unknown", "Done", created=_at(1, 3), resolved=_at(1, 4))
    second = make_issue("Unknown", "Done", created=_at(1, 5), resolved=_at(1, 6))
    summary = build_capacity_report([], [first, second], [first, second], {}, {}, START, END, NOW).summary
    assert summary.tickets_created == 2
    assert summary.tickets_resolved == 2


def test_initiative_progress_by_short_name(make_issue):
    issues = [
        make_issue("DTI-1", "Done", short_name="ZT"),
        make_issue("DTI-2", "In Progress", short_name="ZT"),
        make_issue("DTI-3", "To Do", short_name="ZT"),
        make_issue("DTI-4", "Canceled", short_name="ZT"),
        make_issue("DTI-5", "Done"),
    ]
    progress = build_initiative_progress(issues)
    assert [p.name for p in progress] == ["ZT", "Unassigned"]
    zt = progress[0].to_dict()
    assert (zt["total"], zt["completed"], zt["inProgress"], zt["todo"]) == (4, 2, 1, 1)
    assert zt["completionPercentage"] == 50
    assert zt["issues"][1] == {"key": "DTI-2", "summary": "", "status": "In Progress"}
    assert progress[1].completion_percentage == 100


def test_initiative_progress_by_component_counts_each_component(make_issue):
    issues = [
        make_issue("TG-1", "Done", components=("Platform", "Security")),
        make_issue("TG-2", "To Do", components=("Platform",)),
    ]
    progress = {p.name: p for p in build_initiative_progress(issues, "components")}
    assert progress["Platform"].total == 2
    assert progress["Platform"].completion_percentage == 50
    assert progress["Security"].total == 1
