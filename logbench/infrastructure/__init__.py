"""
Infrastructure package for the log index benchmark.

Centralizes database connectivity (pool factories) and the storage adapter
for the `logs` table. Keep this layer focused on I/O and resource management,
decoupled from loader/query/harness logic.
"""

from logbench.infrastructure.db_factory import (
    build_dsn,
    create_async_pool,
    get_sync_pool,
    open_pool,
)
from logbench.infrastructure.log_store import LogStore, decode_content

__all__ = [
    "build_dsn",
    "create_async_pool",
    "get_sync_pool",
    "open_pool",
    "LogStore",
    "decode_content",
]
