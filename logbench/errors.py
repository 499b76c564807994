"""
Exception hierarchy for the log index benchmark.

- InvalidRequestError: malformed caller input, rejected before storage access.
- StorageError: storage unavailable or query failure; the operation is aborted.
- BatchInsertError: a bulk-load batch failed; earlier batches stay committed.
"""

from __future__ import annotations

from typing import Any, List, Optional


class LogBenchError(Exception):
    """Base class for all errors raised by this package."""


class InvalidRequestError(LogBenchError):
    """Caller input failed validation."""

    def __init__(self, message: str, errors: Optional[List[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class StorageError(LogBenchError):
    """A storage operation failed."""


class BatchInsertError(StorageError):
    """
    A bulk-load batch was rejected by storage.

    Attributes
    ----------
    batch_index : int
        Zero-based index of the failing batch.
    inserted : int
        Rows committed by the batches preceding the failure.
    """

    def __init__(self, batch_index: int, inserted: int, cause: BaseException) -> None:
        super().__init__(f"Failed to insert batch {batch_index}: {cause}")
        self.batch_index = batch_index
        self.inserted = inserted
        self.cause = cause


__all__ = [
    "LogBenchError",
    "InvalidRequestError",
    "StorageError",
    "BatchInsertError",
]
