"""Drain a paged issue source into one in-memory collection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from .config import EPIC_BATCH_SIZE, SEARCH_PAGE_SIZE
from .mappers import map_epic, map_issue
from .models import EpicRecord, IssueRecord, SearchPage

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


class IssueSource(Protocol):
    def search_page(
        self,
        jql: str,
        fields: Sequence[str] | None = None,
        next_page_token: str | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> SearchPage: ...


def fetch_raw(
    source: IssueSource,
    jql: str,
    fields: Sequence[str] | None,
    hard_cap: int,
    *,
    page_size: int = SEARCH_PAGE_SIZE,
    progress: ProgressCallback | None = None,
) -> list[dict]:
    """Collect raw issue payloads until the source is exhausted or ``hard_cap`` is hit.

    Exhaustion is any of: the page is flagged last, no continuation token is
    returned, or a page comes back empty. Source errors propagate untouched;
    nothing is kept for a later resumption.
    """
    out: list[dict] = []
    token: str | None = None
    while len(out) < hard_cap:
        page = source.search_page(jql, fields=fields, next_page_token=token, page_size=page_size)
        out.extend(page.issues)
        logger.debug(
            "Fetched %s issues, total so far: %s, isLast: %s", len(page.issues), len(out), page.is_last
        )
        if progress:
            progress("Fetching issues", len(out), page.total)
        token = page.next_page_token
        if page.is_last or not token or not page.issues:
            break
    return out[:hard_cap]


def fetch_all(
    source: IssueSource,
    jql: str,
    fields: Sequence[str] | None,
    hard_cap: int,
    *,
    page_size: int = SEARCH_PAGE_SIZE,
    progress: ProgressCallback | None = None,
) -> list[IssueRecord]:
    raw = fetch_raw(source, jql, fields, hard_cap, page_size=page_size, progress=progress)
    issues = [map_issue(r) for r in raw]
    logger.info("Collected %s issues for query: %s", len(issues), jql)
    return issues


def _batches(keys: Sequence[str], size: int) -> Iterable[Sequence[str]]:
    for start in range(0, len(keys), size):
        yield keys[start : start + size]


def fetch_epics(
    source: IssueSource,
    keys: Iterable[str],
    fields: Sequence[str] | None,
    *,
    batch_size: int = EPIC_BATCH_SIZE,
) -> dict[str, EpicRecord]:
    """Look up epic records (summary and links) for ``keys`` in batches."""
    unique = sorted({k for k in keys if k})
    epics: dict[str, EpicRecord] = {}
    for batch in _batches(unique, max(batch_size, 1)):
        jql = f"key in ({', '.join(batch)})"
        for raw in fetch_raw(source, jql, fields, hard_cap=len(batch)):
            epic = map_epic(raw)
            epics[epic.key] = epic
    return epics
