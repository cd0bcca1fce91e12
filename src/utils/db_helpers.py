"""Query execution helpers shared by the database mixins and scripts."""

import sqlite3
import time
from typing import Any

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)

QUERY_SNIPPET_MAX_LENGTH = 200


def _query_snippet(query: str) -> str:
    snippet = " ".join(query.split())
    if len(snippet) > QUERY_SNIPPET_MAX_LENGTH:
        snippet = snippet[:QUERY_SNIPPET_MAX_LENGTH] + "..."
    return snippet


def execute_with_timing(
    conn: sqlite3.Connection,
    query: str,
    params: tuple[Any, ...] = (),
    *,
    should_log: bool,
    slow_query_threshold_ms: float,
) -> sqlite3.Cursor:
    """Execute a query, timing it when query logging is on.

    Queries slower than the threshold are logged as warnings; with
    LOG_LEVEL=DEBUG every query is logged.
    """
    if not should_log:
        return conn.execute(query, params)

    started = time.perf_counter()
    cursor = conn.execute(query, params)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    if elapsed_ms >= slow_query_threshold_ms:
        logger.warning(
            "Slow query detected",
            extra={
                "query_snippet": _query_snippet(query),
                "elapsed_ms": elapsed_ms,
                "threshold_ms": slow_query_threshold_ms,
            },
        )
    elif Config.LOG_LEVEL == "DEBUG":
        logger.debug(
            "Query executed",
            extra={"query_snippet": _query_snippet(query), "elapsed_ms": elapsed_ms},
        )

    return cursor


def init_query_logging() -> tuple[bool, float]:
    """Return (should_log_queries, slow_query_threshold_ms) from Config."""
    should_log = Config.LOG_LEVEL == "DEBUG" or Config.is_development()
    return should_log, Config.SLOW_QUERY_THRESHOLD_MS
