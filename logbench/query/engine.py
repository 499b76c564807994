"""
Filtered query engine over the `logs` table (synchronous, psycopg pool).

`count` and `list` are built from the same PredicateSet; `page` runs both on
one pooled connection and wraps the result with pagination metadata. The two
statements are not executed in a shared snapshot, so under concurrent writes
the total and the page are only best-effort consistent.

The engine keeps no mutable state besides its pool, so one instance can be
shared by concurrent callers.
"""

from __future__ import annotations

import time
from typing import Any, List, Optional

from psycopg_pool import ConnectionPool

from logbench.domain.models import LogPage, LogRecord, SearchFilter, total_pages
from logbench.infrastructure.db_factory import get_sync_pool, open_pool
from logbench.infrastructure.log_store import row_to_record, storage_errors
from logbench.query.builder import PredicateSet, build_predicates
from logbench.utils.logging import get_logger

log = get_logger(__name__)

_STYLE = "pyformat"


def _count(conn: Any, predicates: PredicateSet) -> int:
    sql, params = predicates.count_sql(_STYLE)
    with conn.cursor() as cur:
        cur.execute(sql, params)
        (total,) = cur.fetchone()
    return int(total)


def _fetch(conn: Any, predicates: PredicateSet, limit: int, offset: int) -> List[LogRecord]:
    sql, params = predicates.select_sql(_STYLE, limit=limit, offset=offset)
    with conn.cursor() as cur:
        cur.execute(sql, params)
        rows = cur.fetchall()
    return [row_to_record(row) for row in rows]


class LogQueryEngine:
    """
    Parameters
    ----------
    pool : ConnectionPool | None
        Pool to borrow connections from. Defaults to the shared pool.
    dsn_override : str | None
        Open a dedicated pool against this DSN instead (closed by `close`).
    """

    def __init__(
        self, pool: Optional[ConnectionPool] = None, dsn_override: Optional[str] = None
    ) -> None:
        self._owns_pool = pool is None and dsn_override is not None
        if pool is not None:
            self._pool = pool
        elif dsn_override:
            self._pool = open_pool(dsn_override)
        else:
            self._pool = get_sync_pool()

    def close(self) -> None:
        if self._owns_pool:
            self._pool.close()

    def count(self, search_filter: SearchFilter) -> int:
        predicates = build_predicates(search_filter)
        with storage_errors("count logs"):
            with self._pool.connection() as conn:
                return _count(conn, predicates)

    def list(self, search_filter: SearchFilter) -> List[LogRecord]:
        """One page of records, newest first."""
        predicates = build_predicates(search_filter)
        with storage_errors("list logs"):
            with self._pool.connection() as conn:
                return _fetch(conn, predicates, search_filter.limit, search_filter.offset)

    def page(self, search_filter: SearchFilter) -> LogPage:
        predicates = build_predicates(search_filter)
        start = time.perf_counter()
        with storage_errors("query logs"):
            with self._pool.connection() as conn:
                total = _count(conn, predicates)
                records = _fetch(conn, predicates, search_filter.limit, search_filter.offset)
        duration = time.perf_counter() - start

        log.debug(
            "Query executed",
            extra={
                "mode": search_filter.search_mode.value if search_filter.search_mode else None,
                "total": total,
                "rows": len(records),
                "duration": duration,
            },
        )
        return LogPage(
            data=records,
            total=total,
            page=search_filter.page,
            limit=search_filter.limit,
            total_pages=total_pages(total, search_filter.limit),
            query_duration=duration,
        )


__all__ = ["LogQueryEngine"]
