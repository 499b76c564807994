"""
Database connection factory utilities for the log index benchmark.

Provides centralized management of the synchronous psycopg pool shared by the
loader, store and query engine, plus an asyncpg pool factory for the async
query engine. The PoolManager singleton ensures resources are properly cleaned
up on application exit.

Connection establishment retries transient failures using tenacity; queries
themselves are never retried.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import asyncpg
import psycopg
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from logbench.config import Settings, get_settings
from logbench.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings; DATABASE_URL wins when set."""
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def open_pool(dsn: str, min_size: int = 1, max_size: int = 10) -> ConnectionPool:
    """Open a dedicated psycopg pool (callers own and close it)."""
    return ConnectionPool(conninfo=dsn, min_size=min_size, max_size=max_size, open=True)


class PoolManager:
    """
    Thread-safe singleton for the process-wide synchronous pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(
        self, min_size: Optional[int] = None, max_size: Optional[int] = None
    ) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Sizes default to DB_POOL_MIN_SIZE / DB_POOL_MAX_SIZE and only apply on
        first creation.
        """
        with self._lock:
            if self._sync_pool is None:
                settings = get_settings()
                self._sync_pool = open_pool(
                    build_dsn(settings),
                    min_size=min_size or settings.db_pool_min_size,
                    max_size=max_size or settings.db_pool_max_size,
                )
                log.debug("Opened shared connection pool")
            return self._sync_pool

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                pool, self._sync_pool = self._sync_pool, None
                try:
                    pool.close()
                except psycopg.Error as exc:
                    log.warning("Pool close failed", extra={"error": str(exc)})


def get_sync_pool(min_size: Optional[int] = None, max_size: Optional[int] = None) -> ConnectionPool:
    """Get or create the shared synchronous pool via PoolManager."""
    return PoolManager().get_sync_pool(min_size=min_size, max_size=max_size)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OSError, asyncpg.CannotConnectNowError)),
    reraise=True,
)
async def create_async_pool(
    dsn: Optional[str] = None, min_size: int = 1, max_size: int = 10
) -> asyncpg.Pool:
    """
    Create an asyncpg pool with automatic retry on transient connect errors.

    The caller owns the pool and must close it.
    """
    return await asyncpg.create_pool(dsn or build_dsn(), min_size=min_size, max_size=max_size)


__all__ = [
    "PoolManager",
    "build_dsn",
    "open_pool",
    "get_sync_pool",
    "create_async_pool",
]
