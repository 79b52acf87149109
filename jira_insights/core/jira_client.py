"""Jira API client wrapper (REST v3 enhanced search, one page per call)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import requests
from jira import JIRA, JIRAError

from .config import SEARCH_PAGE_SIZE
from .errors import SourceUnavailable
from .models import SearchPage


class JiraAPI:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        self.client = JIRA(
            basic_auth=(email, token), options={"server": self.server, "rest_api_version": "3"}
        )

    def search_page(
        self,
        jql: str,
        fields: Sequence[str] | None = None,
        next_page_token: str | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> SearchPage:
        """Fetch a single page of the enhanced search endpoint.

        Results are never cached: every report pulls fresh data.
        """
        session = getattr(self.client, "_session", None)
        if session is None:
            raise SourceUnavailable("JIRA session unavailable")
        url = f"{self.server}/rest/api/3/search/jql"
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if fields:
            params["fields"] = ",".join(fields)
        if next_page_token:
            params["nextPageToken"] = next_page_token
        try:
            resp = session.get(url, params=params)
        except (requests.RequestException, JIRAError) as exc:
            raise SourceUnavailable(f"Enhanced search request failed: {exc}", detail=str(exc)) from exc
        if resp.status_code >= 400:
            raise SourceUnavailable(
                f"Enhanced search failed {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
                detail=resp.text,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise SourceUnavailable(
                f"Enhanced search returned non-JSON body ({resp.status_code})",
                status_code=resp.status_code,
                detail=resp.text[:200],
            ) from exc
        if not isinstance(data, dict):
            raise SourceUnavailable(
                f"Enhanced search returned an unexpected payload ({resp.status_code})",
                status_code=resp.status_code,
                detail=resp.text[:200],
            )
        issues = data.get("issues") or []
        token = data.get("nextPageToken") or None
        return SearchPage(
            issues=list(issues),
            next_page_token=token,
            is_last=bool(data.get("isLast", token is None)),
            total=data.get("total"),
        )
