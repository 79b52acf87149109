"""Exceptions raised when the issue tracker cannot be reached."""

from __future__ import annotations


class SourceUnavailable(RuntimeError):
    """The issue tracker failed to answer a query (network, auth, or HTTP error).

    Distinct from an empty result: a query that matches nothing returns an
    empty collection, while this error aborts the whole report.
    """

    def __init__(self, message: str, *, status_code: int | None = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
