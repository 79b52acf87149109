"""ReportService: builds queries, drains the issue source and runs the report builders."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pytz

from jira_insights.features.capacity.context import CapacityReport, build_capacity_report
from jira_insights.features.initiatives.context import (
    InitiativeKey,
    InitiativeProgress,
    build_initiative_progress,
)
from jira_insights.features.open_age.context import OpenAgeReport, build_open_age_report
from jira_insights.features.performance.context import PerformanceReport, build_performance_report
from jira_insights.features.service_desk.context import ServiceDeskReport, build_service_desk_report
from jira_insights.features.statistics.context import StatisticsReport, build_statistics_report
from jira_insights.features.trends.context import TrendsReport, build_trends_report

from .config import (
    AGE_FIELDS,
    ANALYTICS_FIELDS,
    CAPACITY_FIELDS,
    CAPACITY_HARD_CAP,
    COMPONENT_FIELDS,
    DEFAULT_AGE_DAYS,
    DEFAULT_ANALYTICS_DAYS,
    DEFAULT_CAPACITY_DAYS,
    DEFAULT_HARD_CAP,
    DEFAULT_PERFORMANCE_DAYS,
    DEFAULT_PROJECTS,
    DEFAULT_TREND_DAYS,
    DEVOPS_TEAM_ID,
    EPIC_FIELDS,
    INITIATIVE_FIELDS,
    INITIATIVE_SCOPE_PROJECTS,
    PERFORMANCE_FIELDS,
    SCOPE_TEAM_IDS,
    SERVICE_DESK_PROJECT,
    SERVICE_DESK_TEAM_IDS,
    SETTINGS,
    SHORT_NAME_FIELDS,
    SHORT_NAME_JQL_FIELD,
    STATISTICS_FIELDS,
    TEAM_FIELD,
    TECHNOLOGY_PROJECT,
    TREND_FIELDS,
    TREND_HARD_CAP,
    AppSettings,
)
from .models import Initiative, IssueRecord
from .paginator import IssueSource, ProgressCallback, fetch_all, fetch_epics
from .settings import InsightSettings, load_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Query:
    jql: str
    fields: Sequence[str]
    hard_cap: int = DEFAULT_HARD_CAP


def jql_list(values: Sequence[str]) -> str:
    """Comma separated JQL values, quoting the ones that contain spaces."""
    return ", ".join(f'"{v}"' if " " in v else v for v in values)


def scope_jql(projects: Sequence[str] = DEFAULT_PROJECTS, teams: Sequence[str] = SCOPE_TEAM_IDS) -> str:
    return (
        f"Project IN ({jql_list(projects)}) OR "
        f"(Project = {SERVICE_DESK_PROJECT} AND {TEAM_FIELD} IN ({jql_list(teams)}))"
    )


def service_desk_jql(teams: Sequence[str] = SERVICE_DESK_TEAM_IDS) -> str:
    return f"Project = {SERVICE_DESK_PROJECT} AND {TEAM_FIELD} IN ({jql_list(teams)})"


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class ReportService:
    def __init__(
        self,
        api: IssueSource,
        settings: InsightSettings | None = None,
        *,
        app_settings: AppSettings = SETTINGS,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.api = api
        self.settings = settings or load_settings()
        self.app_settings = app_settings
        self._clock = clock
        self._tz = pytz.timezone(self.settings.timezone)

    # ------------------ Fetch Helpers ------------------
    def _fetch(self, query: Query, progress: ProgressCallback | None = None) -> list[IssueRecord]:
        return fetch_all(
            self.api,
            query.jql,
            query.fields,
            query.hard_cap,
            page_size=self.app_settings.page_size,
            progress=progress,
        )

    def fetch_concurrently(
        self, queries: Mapping[str, Query], *, progress: ProgressCallback | None = None
    ) -> dict[str, list[IssueRecord]]:
        """Run independent queries in parallel and wait for all of them.

        Nothing is returned unless every query succeeds; the first failure (in
        ``queries`` order) is re-raised once all fetches have finished.
        """
        if not queries:
            return {}
        names = list(queries)
        if progress:
            progress("Fetching issues", 0, len(names))
        with ThreadPoolExecutor(max_workers=max(1, self.app_settings.max_workers)) as pool:
            futures = {name: pool.submit(self._fetch, queries[name]) for name in names}
            wait(futures.values())
        failures = [(name, fut.exception()) for name, fut in futures.items() if fut.exception() is not None]
        for name, exc in failures:
            logger.error("Fetch %r failed: %s", name, exc)
        if failures:
            raise failures[0][1]
        if progress:
            progress("Fetching issues", len(names), len(names))
        return {name: futures[name].result() for name in names}

    def _now(self) -> datetime:
        return self._clock()

    def _today(self) -> date:
        return self._now().astimezone(self._tz).date()

    def _window(self, days: int) -> tuple[date, date]:
        """Inclusive window of ``days`` local days ending today."""
        today = self._today()
        return today - timedelta(days=max(days, 1) - 1), today

    # ------------------ Reports ------------------
    def statistics(
        self, *, hard_cap: int = DEFAULT_HARD_CAP, progress: ProgressCallback | None = None
    ) -> StatisticsReport:
        query = Query(f"({scope_jql()}) ORDER BY created DESC", STATISTICS_FIELDS, hard_cap)
        return build_statistics_report(self._fetch(query, progress))

    def performance(
        self, days: int = DEFAULT_PERFORMANCE_DAYS, *, progress: ProgressCallback | None = None
    ) -> PerformanceReport:
        # look back ``days`` whole days before today
        since = (self._today() - timedelta(days=days)).isoformat()
        query = Query(
            f'({scope_jql()}) AND (created >= "{since}" OR resolved >= "{since}") ORDER BY created DESC',
            PERFORMANCE_FIELDS,
        )
        return build_performance_report(self._fetch(query, progress), days)

    def service_desk_trends(
        self,
        days: int = DEFAULT_TREND_DAYS,
        *,
        skip_weekends: bool = False,
        teams: Sequence[str] = SERVICE_DESK_TEAM_IDS,
        progress: ProgressCallback | None = None,
    ) -> TrendsReport:
        """Daily volume for the service desk teams.

        Older tickets that were still open, or resolved, during the window are
        fetched as well so the open counts on early days are complete.
        """
        start, end = self._window(days)
        since = start.isoformat()
        query = Query(
            f'{service_desk_jql(teams)} AND (created >= "{since}" OR resolved >= "{since}" '
            f"OR statusCategory != Done) ORDER BY created DESC",
            TREND_FIELDS,
            TREND_HARD_CAP,
        )
        issues = self._fetch(query, progress)
        logger.info("Service desk trends: %s issues over %s days", len(issues), days)
        return build_trends_report(issues, start, end, skip_weekends=skip_weekends, tz=self._tz)

    def open_ticket_age(
        self,
        days: int = DEFAULT_AGE_DAYS,
        *,
        team: str = DEVOPS_TEAM_ID,
        progress: ProgressCallback | None = None,
    ) -> OpenAgeReport:
        start, end = self._window(days)
        query = Query(
            f"{service_desk_jql([team])} AND statusCategory != Done ORDER BY created DESC",
            AGE_FIELDS,
            TREND_HARD_CAP,
        )
        issues = self._fetch(query, progress)
        return build_open_age_report(issues, start, end, self._now(), tz=self._tz)

    def service_desk_analytics(
        self,
        days: int = DEFAULT_ANALYTICS_DAYS,
        *,
        teams: Sequence[str] = SERVICE_DESK_TEAM_IDS,
        progress: ProgressCallback | None = None,
    ) -> ServiceDeskReport:
        start, end = self._window(days)
        since = start.isoformat()
        query = Query(
            f'{service_desk_jql(teams)} AND (created >= "{since}" OR resolved >= "{since}") '
            "ORDER BY created DESC",
            ANALYTICS_FIELDS,
            TREND_HARD_CAP,
        )
        issues = self._fetch(query, progress)
        return build_service_desk_report(issues, start, end, self.settings, tz=self._tz)

    def capacity_planning(
        self, days: int = DEFAULT_CAPACITY_DAYS, *, progress: ProgressCallback | None = None
    ) -> CapacityReport:
        """Open work, recent flow and the work breakdown for the engineering scope.

        The open, created, resolved and initiative queries run concurrently;
        epic details are looked up afterwards for the parents of open issues.
        """
        start, end = self._window(days)
        since = start.isoformat()
        scope = scope_jql()
        s = self.settings
        results = self.fetch_concurrently(
            {
                "open": Query(f"({scope}) AND statusCategory != Done", CAPACITY_FIELDS, CAPACITY_HARD_CAP),
                "created": Query(f'({scope}) AND created >= "{since}"', CAPACITY_FIELDS, CAPACITY_HARD_CAP),
                "resolved": Query(f'({scope}) AND resolved >= "{since}"', CAPACITY_FIELDS, CAPACITY_HARD_CAP),
                "initiatives": Query(
                    f'project = {s.initiative_project} AND issuetype = "{s.initiative_issue_type}"',
                    INITIATIVE_FIELDS,
                ),
            },
            progress=progress,
        )
        open_issues = [i for i in results["open"] if i.is_open]
        if progress:
            progress("Loading epic details", None, None)
        epics = fetch_epics(self.api, (i.parent.key for i in open_issues if i.parent is not None), EPIC_FIELDS)
        initiatives = {i.key: Initiative(i.key, i.summary) for i in results["initiatives"]}
        logger.info(
            "Capacity planning: %s open, %s epics, %s initiatives", len(open_issues), len(epics), len(initiatives)
        )
        return build_capacity_report(
            open_issues,
            results["created"],
            results["resolved"],
            epics,
            initiatives,
            start,
            end,
            self._now(),
            s,
            tz=self._tz,
        )

    def initiative_progress(
        self,
        key: InitiativeKey | str = InitiativeKey.SHORT_NAME,
        *,
        hard_cap: int = DEFAULT_HARD_CAP,
        progress: ProgressCallback | None = None,
    ) -> list[InitiativeProgress]:
        group_key = InitiativeKey(key)
        if group_key is InitiativeKey.COMPONENTS:
            query = Query(
                f'Project = "{TECHNOLOGY_PROJECT}" AND component IS NOT EMPTY ORDER BY created DESC',
                COMPONENT_FIELDS,
                hard_cap,
            )
        else:
            query = Query(
                f"Project IN ({jql_list(INITIATIVE_SCOPE_PROJECTS)}) AND {SHORT_NAME_JQL_FIELD} IS NOT EMPTY "
                "ORDER BY created DESC",
                SHORT_NAME_FIELDS,
                hard_cap,
            )
        return build_initiative_progress(self._fetch(query, progress), group_key)
