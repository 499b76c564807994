"""
Domain package for the log index benchmark.

Exports the core domain models and request/response contracts used across the
loader, query engines, harness and service layer. Keep this package focused on
data definitions and validation concerns.
"""

from logbench.domain.contracts import (
    Acknowledgement,
    CreateLogRequest,
    InitializeRequest,
    InitializeResponse,
    ListLogsRequest,
    SearchPartialRequest,
)
from logbench.domain.models import (
    BatchSpec,
    BenchmarkCase,
    BenchmarkReport,
    CaseResult,
    ContentDocument,
    ContentSize,
    LoadResult,
    LogPage,
    LogRecord,
    SearchFilter,
    SearchMode,
)

__all__ = [
    "Acknowledgement",
    "BatchSpec",
    "BenchmarkCase",
    "BenchmarkReport",
    "CaseResult",
    "ContentDocument",
    "ContentSize",
    "CreateLogRequest",
    "InitializeRequest",
    "InitializeResponse",
    "ListLogsRequest",
    "LoadResult",
    "LogPage",
    "LogRecord",
    "SearchFilter",
    "SearchMode",
    "SearchPartialRequest",
]
