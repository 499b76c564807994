"""
Domain models for the log index benchmark.

Defines the persisted log record (aligned with `db/init.sql`), the ephemeral
search filter consumed by the query engines, and the value types exchanged by
the loader and the benchmark harness.
"""
from __future__ import annotations

import math
import re
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import AwareDatetime, BaseModel, Field, field_validator, model_validator

from logbench.utils.logging import get_logger

log = get_logger(__name__)

# Content documents are JSON trees: scalars, sequences and string-keyed mappings.
JSONScalar = Union[str, int, float, bool, None]
JSONValue = Union[JSONScalar, List["JSONValue"], Dict[str, "JSONValue"]]
ContentDocument = Dict[str, JSONValue]

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_END_OF_DAY = time(23, 59, 59)


class ContentSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SearchMode(str, Enum):
    FTS = "fts"
    PARTIAL = "partial"

    @property
    def label(self) -> str:
        return "FTS" if self is SearchMode.FTS else "Partial"


class LogRecord(BaseModel):
    """
    Representation of a single row in the `logs` table.
    """

    id: uuid.UUID = Field(..., description="Primary key, generated by the database.")
    user_id: uuid.UUID = Field(..., description="Acting principal (not validated).")
    domain: str = Field(..., description="Originating service or site.")
    action: str = Field(..., description="Event type label.")
    content: Dict[str, Any] = Field(default_factory=dict, description="JSON document.")
    created_at: AwareDatetime = Field(..., description="Event timestamp.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("content", mode="before")
    @classmethod
    def _content_never_null(cls, value: Any) -> Any:
        return {} if value is None else value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SearchFilter(BaseModel):
    """
    Query descriptor shared by `count` and `list`.

    Absent fields impose no constraint. `full_text` and `partial` are mutually
    exclusive. Empty strings are treated as absent.
    """

    user_id: Optional[str] = None
    domain: Optional[str] = None
    created_at_from: Optional[Union[datetime, date]] = None
    created_at_to: Optional[Union[datetime, date]] = None
    full_text: Optional[str] = None
    partial: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1)

    model_config = {"frozen": True}

    @field_validator("user_id", "domain", "full_text", "partial", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value

    @field_validator("created_at_from", "created_at_to", mode="before")
    @classmethod
    def _parse_bound(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            if _DATE_ONLY.match(value):
                return date.fromisoformat(value)
            return datetime.fromisoformat(value)
        return value

    @model_validator(mode="after")
    def _single_search_mode(self) -> "SearchFilter":
        if self.full_text is not None and self.partial is not None:
            raise ValueError("full_text and partial search are mutually exclusive")
        return self

    @property
    def user_uuid(self) -> Optional[uuid.UUID]:
        """Parsed user id; an unparsable value means the filter is not applied."""
        if self.user_id is None:
            return None
        try:
            return uuid.UUID(self.user_id)
        except ValueError:
            log.debug("Ignoring unparsable user_id filter", extra={"user_id": self.user_id})
            return None

    @property
    def lower_bound(self) -> Optional[datetime]:
        value = self.created_at_from
        if value is None:
            return None
        if isinstance(value, datetime):
            return _as_utc(value)
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    @property
    def upper_bound(self) -> Optional[datetime]:
        """Inclusive upper bound; a calendar date extends to 23:59:59 of that day."""
        value = self.created_at_to
        if value is None:
            return None
        if isinstance(value, datetime):
            return _as_utc(value)
        return datetime.combine(value, _END_OF_DAY, tzinfo=timezone.utc)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def search_mode(self) -> Optional[SearchMode]:
        if self.full_text is not None:
            return SearchMode.FTS
        if self.partial is not None:
            return SearchMode.PARTIAL
        return None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


class LogPage(BaseModel):
    """A page of log records plus pagination metadata."""

    data: List[LogRecord]
    total: int
    page: int
    limit: int
    total_pages: int
    query_duration: float = Field(..., description="Count + fetch wall-clock seconds.")


@dataclass(frozen=True)
class BatchSpec:
    """One bulk-load batch: its position, size and the identity it shares."""

    index: int
    size: int
    user_id: uuid.UUID
    domain: str


@dataclass
class LoadResult:
    inserted: int
    elapsed_seconds: float
    content_size: str
    batches: int
    peak_rss_bytes: Optional[int] = None
    cpu_percent: Optional[float] = None

    @property
    def records_per_second(self) -> float:
        return self.inserted / self.elapsed_seconds if self.elapsed_seconds > 0 else 0.0


@dataclass(frozen=True)
class BenchmarkCase:
    name: str
    mode: SearchMode
    term: str
    limit: int
    description: str


@dataclass
class CaseResult:
    case: BenchmarkCase
    duration_seconds: float
    rows_found: int


@dataclass
class BenchmarkReport:
    dataset_size: int
    common_term: str
    rare_term: str
    content_size: Optional[str] = None
    results: List[CaseResult] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict:
        payload = asdict(self)
        for entry in payload["results"]:
            entry["case"]["mode"] = entry["case"]["mode"].value
        return payload


__all__ = [
    "JSONValue",
    "ContentDocument",
    "ContentSize",
    "SearchMode",
    "LogRecord",
    "SearchFilter",
    "LogPage",
    "BatchSpec",
    "LoadResult",
    "BenchmarkCase",
    "CaseResult",
    "BenchmarkReport",
    "total_pages",
]
