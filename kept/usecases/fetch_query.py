"""Run a backend read and wrap the outcome in a three-state ``QueryResult``."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from kept.domain.query import QueryResult
from kept.usecases.error_mapping import BACKEND_FAILURES, map_api_error

log = logging.getLogger(__name__)

T = TypeVar("T")


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def run_query(fetch: Callable[..., T], *args: Any, **kwargs: Any) -> QueryResult[T]:
    """Call ``fetch(*args, **kwargs)`` unless a positional argument is missing.

    Positional arguments are the query's required inputs (active home id,
    route parameter, ...). When any of them is ``None`` or blank the query is
    skipped and ``QueryResult.skipped()`` is returned without touching the
    backend. Keyword arguments are optional and never cause a skip.

    Raises:
        UseCaseError: When the backend read fails (code ``QUERY_FAILED`` or a
            mapped adapter code).
    """
    if any(is_missing(arg) for arg in args):
        return QueryResult.skipped()
    name = getattr(fetch, "__name__", "query")
    try:
        value = fetch(*args, **kwargs)
    except BACKEND_FAILURES as exc:
        log.warning("Query %s failed: %s", name, exc)
        raise map_api_error(
            exc, default_code="QUERY_FAILED", default_message="Failed to load data."
        ) from exc
    return QueryResult.resolved(value)


__all__ = ["is_missing", "run_query"]
