"""
Log Index Bench - PostgreSQL JSONB log storage and search benchmark.

This package loads synthetic, multilingual log records into PostgreSQL and
measures how two content-search strategies behave as data grows:

- Full-text search (to_tsvector / plainto_tsquery, GIN index)
- Partial substring search (ILIKE backed by a pg_trgm GIN index)

It also exposes the query surface a log dashboard needs: filtered,
paginated listing with total counts and per-query timing.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from logbench.config import Settings, get_settings
from logbench.errors import BatchInsertError, InvalidRequestError, LogBenchError, StorageError
from logbench.generator import ContentGenerator
from logbench.harness import BenchmarkHarness, SeedPlan
from logbench.loader import BulkLoader
from logbench.query import AsyncLogQueryEngine, LogQueryEngine
from logbench.service import LogService
from logbench.utils.logging import configure_logging, get_logger
from logbench.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "LogBenchError",
    "InvalidRequestError",
    "StorageError",
    "BatchInsertError",
    # Ingestion
    "ContentGenerator",
    "BulkLoader",
    # Querying
    "LogQueryEngine",
    "AsyncLogQueryEngine",
    # Benchmark and service
    "BenchmarkHarness",
    "SeedPlan",
    "LogService",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
