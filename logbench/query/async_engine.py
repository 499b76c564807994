"""
Async variant of the filtered query engine, on an asyncpg pool.

Intended for interactive callers that issue many concurrent reads. Predicates
come from the same builder as the sync engine, rendered with asyncpg's
numeric placeholders. asyncpg is used directly (rather than psycopg async)
for its binary protocol and lower per-query overhead under concurrency.
"""

from __future__ import annotations

import time
from typing import Any, List, Optional

import asyncpg

from logbench.domain.models import LogPage, LogRecord, SearchFilter, total_pages
from logbench.errors import StorageError
from logbench.infrastructure.db_factory import create_async_pool
from logbench.infrastructure.log_store import row_to_record
from logbench.query.builder import PredicateSet, build_predicates
from logbench.utils.logging import get_logger

log = get_logger(__name__)

_STYLE = "numeric"
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


async def _count(conn: Any, predicates: PredicateSet) -> int:
    sql, params = predicates.count_sql(_STYLE)
    return int(await conn.fetchval(sql, *params))


async def _fetch(conn: Any, predicates: PredicateSet, limit: int, offset: int) -> List[LogRecord]:
    sql, params = predicates.select_sql(_STYLE, limit=limit, offset=offset)
    rows = await conn.fetch(sql, *params)
    return [row_to_record(tuple(row)) for row in rows]


class AsyncLogQueryEngine:
    """
    Usage:
        engine = await AsyncLogQueryEngine.connect()
        try:
            page = await engine.page(SearchFilter(partial="login"))
        finally:
            await engine.close()
    """

    def __init__(self, pool: Any, owns_pool: bool = False) -> None:
        self._pool = pool
        self._owns_pool = owns_pool

    @classmethod
    async def connect(
        cls, dsn: Optional[str] = None, min_size: int = 1, max_size: int = 10
    ) -> "AsyncLogQueryEngine":
        pool = await create_async_pool(dsn, min_size=min_size, max_size=max_size)
        return cls(pool, owns_pool=True)

    async def close(self) -> None:
        if self._owns_pool:
            await self._pool.close()

    async def count(self, search_filter: SearchFilter) -> int:
        predicates = build_predicates(search_filter)
        try:
            async with self._pool.acquire() as conn:
                return await _count(conn, predicates)
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"count logs failed: {exc}") from exc

    async def list(self, search_filter: SearchFilter) -> List[LogRecord]:
        predicates = build_predicates(search_filter)
        try:
            async with self._pool.acquire() as conn:
                return await _fetch(conn, predicates, search_filter.limit, search_filter.offset)
        except _DRIVER_ERRORS as exc:
            raise StorageError(f"list logs failed: {exc}") from exc

    async def page(self, search_filter: SearchFilter) -> LogPage:
        predicates = build_predicates(search_filter)
        start = time.perf_counter()
        try:
            async with self._pool.acquire() as conn:
                total = await _count(conn, predicates)
                records = await _fetch(
                    conn, predicates, search_filter.limit, search_filter.offset
                )
        except _DRIVER_ERRORS as exc:
            log.error("[STORAGE FAILED] async query logs", extra={"error": str(exc)})
            raise StorageError(f"query logs failed: {exc}") from exc
        duration = time.perf_counter() - start

        return LogPage(
            data=records,
            total=total,
            page=search_filter.page,
            limit=search_filter.limit,
            total_pages=total_pages(total, search_filter.limit),
            query_duration=duration,
        )


__all__ = ["AsyncLogQueryEngine"]
