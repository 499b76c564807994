"""
Pytest configuration for the log index benchmark.

Provides fixtures for:
- Database connection management
- Schema initialization from db/init.sql
- Test data seeding through the real bulk loader
- Settings override for integration tests
"""

from __future__ import annotations

import os
import random
from pathlib import Path
from typing import Generator

import psycopg
import pytest

from logbench.config import Settings
from logbench.domain.models import ContentSize
from logbench.generator import ContentGenerator
from logbench.infrastructure.log_store import LogStore
from logbench.loader import BulkLoader

SMALL_SEED_ROWS = 1000
SEED = 42


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5435")),
        db_user=os.getenv("DB_USER", "loguser"),
        db_password=os.getenv("DB_PASSWORD", "logpassword"),
        db_name=os.getenv("DB_NAME", "logdb"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Apply db/init.sql. Every statement in it is idempotent.
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_logs_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Clean the logs table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.logs RESTART IDENTITY CASCADE;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.logs RESTART IDENTITY CASCADE;")
    db_connection.commit()


@pytest.fixture(scope="function")
def log_store(test_dsn: str, db_schema_initialized: bool) -> Generator[LogStore, None, None]:
    store = LogStore(dsn_override=test_dsn)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture(scope="function")
def seeded_logs_small(
    db_connection: psycopg.Connection,
    clean_logs_table,
    log_store: LogStore,
) -> int:
    """
    Seed 1000 small records (one batch) with a fixed RNG seed.

    Returns the number of rows in the table afterwards.
    """
    loader = BulkLoader(log_store, ContentGenerator(rng=random.Random(SEED)))
    loader.load(SMALL_SEED_ROWS, ContentSize.SMALL)

    with db_connection.cursor() as cur:
        cur.execute("SELECT COUNT(*) FROM public.logs;")
        count = cur.fetchone()[0]

    return count
