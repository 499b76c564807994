"""
Transport-independent service layer.

Implements the operations outer surfaces expose (Initialize, ListLogs,
SearchPartial, Truncate, and the single-record CreateLog path). Raw payloads
are validated into request models before any storage access; validation
failures surface as InvalidRequestError, storage failures as StorageError.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from logbench.domain.contracts import (
    Acknowledgement,
    CreateLogRequest,
    InitializeRequest,
    InitializeResponse,
    ListLogsRequest,
    SearchPartialRequest,
)
from logbench.domain.models import LogPage, LogRecord, SearchFilter
from logbench.errors import InvalidRequestError
from logbench.infrastructure.log_store import LogStore
from logbench.loader import BulkLoader
from logbench.query.engine import LogQueryEngine
from logbench.utils.logging import get_logger

log = get_logger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)


def parse_request(model: Type[RequestT], payload: Union[RequestT, Mapping[str, Any]]) -> RequestT:
    """Validate a raw mapping into `model`; already-built models pass through."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(
            f"Invalid {model.__name__}: {exc.error_count()} error(s)",
            errors=exc.errors(include_url=False),
        ) from exc


class LogService:
    def __init__(
        self,
        store: LogStore,
        engine: LogQueryEngine,
        loader: Optional[BulkLoader] = None,
    ) -> None:
        self.store = store
        self.engine = engine
        self.loader = loader or BulkLoader(store)

    @classmethod
    def from_dsn(cls, dsn: Optional[str] = None) -> "LogService":
        return cls(LogStore(dsn_override=dsn), LogQueryEngine(dsn_override=dsn))

    def close(self) -> None:
        self.engine.close()
        self.store.close()

    def initialize(
        self, payload: Union[InitializeRequest, Mapping[str, Any]]
    ) -> InitializeResponse:
        request = parse_request(InitializeRequest, payload)
        log.info(
            "Initialize requested",
            extra={"rows": request.record_count, "content_size": request.content_size.value},
        )
        result = self.loader.load(request.record_count, request.content_size)
        return InitializeResponse(
            inserted_count=result.inserted,
            content_size=request.content_size,
            duration=result.elapsed_seconds,
            records_per_second=round(result.records_per_second, 2),
        )

    def list_logs(self, payload: Union[ListLogsRequest, Mapping[str, Any]]) -> LogPage:
        request = parse_request(ListLogsRequest, payload)
        return self.engine.page(self._to_filter(request))

    def search_partial(
        self, payload: Union[SearchPartialRequest, Mapping[str, Any]]
    ) -> LogPage:
        request = parse_request(SearchPartialRequest, payload)
        return self.engine.page(self._to_filter(request))

    def truncate(self) -> Acknowledgement:
        self.store.truncate()
        return Acknowledgement(message="Database truncated successfully")

    def create_log(self, payload: Union[CreateLogRequest, Mapping[str, Any]]) -> LogRecord:
        request = parse_request(CreateLogRequest, payload)
        return self.store.insert(
            user_id=request.user_id,
            domain=request.domain,
            action=request.action,
            content=request.content,
            created_at=request.created_at,
        )

    @staticmethod
    def _to_filter(request: Union[ListLogsRequest, SearchPartialRequest]) -> SearchFilter:
        # Malformed dates only surface once the filter is built.
        try:
            return request.to_filter()
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Invalid filter: {exc.error_count()} error(s)",
                errors=exc.errors(include_url=False),
            ) from exc


__all__ = ["LogService", "parse_request"]
