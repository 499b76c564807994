"""
Request/response contracts exposed to outer surfaces (CLI, HTTP adapters).

Field names follow the wire format the dashboard and API clients use
(`record_count`, `content_like`, `search_term`, ...). Requests translate into
the internal SearchFilter via `to_filter()`.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from logbench.domain.models import ContentSize, SearchFilter

RecordCount = Literal[1000, 10_000, 100_000, 1_000_000, 10_000_000]


class InitializeRequest(BaseModel):
    record_count: RecordCount
    content_size: ContentSize

    model_config = {"frozen": True}


class InitializeResponse(BaseModel):
    message: str = "Data initialized successfully"
    inserted_count: int
    content_size: ContentSize
    duration: float = Field(..., description="Wall-clock seconds.")
    records_per_second: float


class _FilterParams(BaseModel):
    user_id: Optional[str] = None
    domain: Optional[str] = None
    created_at: Optional[str] = Field(None, description="Lower bound (YYYY-MM-DD).")
    created_at_to: Optional[str] = Field(None, description="Upper bound (YYYY-MM-DD).")
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1)

    model_config = {"frozen": True}

    def _common(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "domain": self.domain,
            "created_at_from": self.created_at,
            "created_at_to": self.created_at_to,
            "page": self.page,
            "limit": self.limit,
        }


class ListLogsRequest(_FilterParams):
    content_like: Optional[str] = Field(None, description="Full-text search term.")

    def to_filter(self) -> SearchFilter:
        return SearchFilter(full_text=self.content_like, **self._common())


class SearchPartialRequest(_FilterParams):
    search_term: str = Field(..., min_length=1, description="Substring to match.")

    def to_filter(self) -> SearchFilter:
        return SearchFilter(partial=self.search_term, **self._common())


class CreateLogRequest(BaseModel):
    user_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    domain: str = Field(..., min_length=1, max_length=255)
    action: str = Field(..., min_length=1, max_length=255)
    content: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class Acknowledgement(BaseModel):
    message: str


__all__ = [
    "RecordCount",
    "InitializeRequest",
    "InitializeResponse",
    "ListLogsRequest",
    "SearchPartialRequest",
    "CreateLogRequest",
    "Acknowledgement",
]
