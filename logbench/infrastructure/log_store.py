"""
Storage adapter for the `logs` table.

Owns every statement that is not a filtered read: the COPY bulk path, the
single-record insert, counting, sampling and truncation. Rows come back as
tuples in `RECORD_COLUMNS` order; `row_to_record` turns them into LogRecord
models and is shared with the query engines.
"""

from __future__ import annotations

import json
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, Iterable, List, Optional, Sequence, Tuple

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from logbench.domain.models import LogRecord
from logbench.errors import StorageError
from logbench.infrastructure.db_factory import get_sync_pool, open_pool
from logbench.utils.logging import get_logger

log = get_logger(__name__)

TABLE = "logs"
RECORD_COLUMNS = "id, user_id, domain, action, content::text, created_at"
COPY_SQL = f"COPY {TABLE} (user_id, domain, action, content, created_at) FROM STDIN"

# (user_id, domain, action, content, created_at)
CopyRow = Tuple[uuid.UUID, str, str, Dict[str, Any], datetime]


def decode_content(raw: Any) -> Dict[str, Any]:
    """
    Decode a stored content document.

    Anything that is not a JSON object degrades to {"raw": <text>} so a
    single bad row never fails a whole page.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, (bytes, bytearray)) else str(raw)
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"raw": text}
    if not isinstance(parsed, dict):
        return {"raw": text}
    return parsed


def row_to_record(row: Sequence[Any]) -> LogRecord:
    record_id, user_id, domain, action, content, created_at = row
    return LogRecord(
        id=record_id,
        user_id=user_id,
        domain=domain,
        action=action,
        content=decode_content(content),
        created_at=created_at,
    )


@contextmanager
def storage_errors(operation: str) -> Generator[None, None, None]:
    """Translate driver errors into StorageError for the caller."""
    try:
        yield
    except psycopg.Error as exc:
        log.error(f"[STORAGE FAILED] {operation}", extra={"operation": operation, "error": str(exc)})
        raise StorageError(f"{operation} failed: {exc}") from exc


class LogStore:
    """
    Thin data-access layer over a psycopg ConnectionPool.

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

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    def close(self) -> None:
        if self._owns_pool:
            self._pool.close()

    def ping(self) -> None:
        with storage_errors("ping"):
            with self._pool.connection() as conn:
                conn.execute("SELECT 1")

    def copy_rows(self, rows: Iterable[CopyRow]) -> int:
        """
        Stream rows through COPY in a single transaction.

        Returns the row count reported by the server.
        """
        written = 0
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                with cur.copy(COPY_SQL) as copy:
                    for user_id, domain, action, content, created_at in rows:
                        copy.write_row((user_id, domain, action, Jsonb(content), created_at))
                        written += 1
                accepted = cur.rowcount
        return accepted if accepted >= 0 else written

    def insert(
        self,
        user_id: uuid.UUID,
        domain: str,
        action: str,
        content: Dict[str, Any],
        created_at: Optional[datetime] = None,
    ) -> LogRecord:
        sql = (
            f"INSERT INTO {TABLE} (user_id, domain, action, content, created_at) "
            f"VALUES (%s, %s, %s, %s, COALESCE(%s, now())) RETURNING {RECORD_COLUMNS}"
        )
        with storage_errors("insert"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id, domain, action, Jsonb(content or {}), created_at))
                    row = cur.fetchone()
        return row_to_record(row)

    def count_all(self) -> int:
        with storage_errors("count"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(f"SELECT COUNT(*) FROM {TABLE}")
                    (total,) = cur.fetchone()
        return int(total)

    def sample(self, limit: int) -> List[LogRecord]:
        """Newest `limit` records."""
        sql = f"SELECT {RECORD_COLUMNS} FROM {TABLE} ORDER BY created_at DESC LIMIT %s"
        with storage_errors("sample"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (limit,))
                    rows = cur.fetchall()
        return [row_to_record(row) for row in rows]

    def truncate(self) -> None:
        with storage_errors("truncate"):
            with self._pool.connection() as conn:
                conn.execute(f"TRUNCATE TABLE {TABLE} RESTART IDENTITY CASCADE")
        log.info("Table truncated", extra={"table": TABLE})


__all__ = [
    "TABLE",
    "RECORD_COLUMNS",
    "CopyRow",
    "LogStore",
    "decode_content",
    "row_to_record",
    "storage_errors",
]
