from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from logbench.domain.contracts import InitializeRequest, ListLogsRequest
from logbench.domain.models import ContentSize, LoadResult, LogPage, LogRecord, SearchFilter
from logbench.errors import InvalidRequestError
from logbench.service import LogService, parse_request


class _FakeEngine:
    def __init__(self) -> None:
        self.filters: List[SearchFilter] = []

    def page(self, search_filter: SearchFilter) -> LogPage:
        self.filters.append(search_filter)
        return LogPage(
            data=[], total=0, page=search_filter.page, limit=search_filter.limit,
            total_pages=0, query_duration=0.001,
        )

    def close(self) -> None:
        pass


class _FakeStore:
    def __init__(self) -> None:
        self.truncated = False
        self.inserted: List[Dict[str, Any]] = []

    def truncate(self) -> None:
        self.truncated = True

    def insert(self, **kwargs: Any) -> LogRecord:
        self.inserted.append(kwargs)
        return LogRecord(
            id=uuid.uuid4(),
            created_at=kwargs["created_at"] or datetime.now(timezone.utc),
            user_id=kwargs["user_id"],
            domain=kwargs["domain"],
            action=kwargs["action"],
            content=kwargs["content"],
        )

    def close(self) -> None:
        pass


class _FakeLoader:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def load(self, total_count: int, content_size: ContentSize) -> LoadResult:
        self.calls.append((total_count, content_size))
        return LoadResult(total_count, 0.5, content_size.value, total_count // 1000)


@pytest.fixture
def parts():
    return _FakeStore(), _FakeEngine(), _FakeLoader()


@pytest.fixture
def service(parts) -> LogService:
    store, engine, loader = parts
    return LogService(store, engine, loader)


def test_initialize_loads_and_reports_throughput(service, parts):
    response = service.initialize({"record_count": 10_000, "content_size": "medium"})

    assert parts[2].calls == [(10_000, ContentSize.MEDIUM)]
    assert response.inserted_count == 10_000
    assert response.content_size is ContentSize.MEDIUM
    assert response.duration == 0.5
    assert response.records_per_second == 20_000.0
    assert response.message == "Data initialized successfully"


@pytest.mark.parametrize(
    "payload",
    [
        {"record_count": 5000, "content_size": "small"},
        {"record_count": 1000, "content_size": "huge"},
        {"content_size": "small"},
    ],
)
def test_initialize_rejects_values_outside_the_enums(service, parts, payload):
    with pytest.raises(InvalidRequestError) as excinfo:
        service.initialize(payload)
    assert excinfo.value.errors
    assert parts[2].calls == []


def test_list_logs_maps_content_like_to_full_text(service, parts):
    service.list_logs({"content_like": "login", "domain": "test.org", "page": 2, "limit": 10})

    (search_filter,) = parts[1].filters
    assert search_filter.full_text == "login"
    assert search_filter.partial is None
    assert search_filter.domain == "test.org"
    assert search_filter.offset == 10


def test_list_logs_without_search_term(service, parts):
    page = service.list_logs({})
    assert page.limit == 50
    assert parts[1].filters[0].search_mode is None


def test_search_partial_requires_a_term(service, parts):
    with pytest.raises(InvalidRequestError):
        service.search_partial({"search_term": ""})
    with pytest.raises(InvalidRequestError):
        service.search_partial({})
    assert parts[1].filters == []


def test_search_partial_maps_search_term(service, parts):
    service.search_partial({"search_term": "err", "created_at": "2024-01-01"})
    (search_filter,) = parts[1].filters
    assert search_filter.partial == "err"
    assert search_filter.lower_bound == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_malformed_date_is_invalid_request(service, parts):
    with pytest.raises(InvalidRequestError, match="Invalid filter"):
        service.list_logs({"created_at_to": "yesterday"})
    assert parts[1].filters == []


def test_truncate_acknowledges(service, parts):
    assert service.truncate().message == "Database truncated successfully"
    assert parts[0].truncated is True


def test_create_log_generates_user_id(service, parts):
    record = service.create_log(
        {"domain": "example-api", "action": "GET /api/logs", "content": {"status": 200}}
    )

    (call,) = parts[0].inserted
    assert isinstance(call["user_id"], uuid.UUID)
    assert call["created_at"] is None
    assert record.domain == "example-api"
    assert record.content == {"status": 200}


def test_create_log_requires_domain_and_action(service):
    with pytest.raises(InvalidRequestError):
        service.create_log({"action": "x"})


def test_parse_request_passes_models_through():
    request = InitializeRequest(record_count=1000, content_size=ContentSize.SMALL)
    assert parse_request(InitializeRequest, request) is request
    assert isinstance(parse_request(ListLogsRequest, {"limit": 5}), ListLogsRequest)
