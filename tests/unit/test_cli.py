from __future__ import annotations

from typing import Any, Dict, List

import pytest
from typer.testing import CliRunner

from logbench import main
from logbench.domain.contracts import Acknowledgement
from logbench.domain.models import LogPage
from logbench.errors import InvalidRequestError, StorageError

runner = CliRunner()


class _FakeService:
    instances: List["_FakeService"] = []

    def __init__(self) -> None:
        self.payloads: List[Dict[str, Any]] = []
        self.closed = False
        self.error: Exception | None = None
        _FakeService.instances.append(self)

    @classmethod
    def from_dsn(cls, dsn: str | None = None) -> "_FakeService":
        return cls()

    def search_partial(self, payload: Dict[str, Any]) -> LogPage:
        self.payloads.append(payload)
        if payload["search_term"] == "":
            raise InvalidRequestError(
                "Invalid SearchPartialRequest: 1 error(s)",
                errors=[{"loc": ("search_term",), "msg": "too short"}],
            )
        return LogPage(data=[], total=0, page=1, limit=payload["limit"], total_pages=0, query_duration=0.0)

    def truncate(self) -> Acknowledgement:
        raise StorageError("truncate failed: connection refused")

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _fake_service(monkeypatch):
    _FakeService.instances.clear()
    monkeypatch.setattr(main, "LogService", _FakeService)
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)


def test_search_outputs_json_page():
    result = runner.invoke(main.app, ["search", "login", "--limit", "5", "--json"])

    assert result.exit_code == 0
    assert '"limit": 5' in result.stdout
    (service,) = _FakeService.instances
    assert service.payloads[0]["search_term"] == "login"
    assert service.closed is True


def test_invalid_request_exits_with_code_2():
    result = runner.invoke(main.app, ["search", ""])
    assert result.exit_code == 2
    assert _FakeService.instances[0].closed is True


def test_storage_error_exits_with_code_1():
    result = runner.invoke(main.app, ["truncate", "--yes"])
    assert result.exit_code == 1


def test_info_prints_configuration():
    result = runner.invoke(main.app, ["info"])
    assert result.exit_code == 0
    assert "batch=" in result.stdout


def test_whitespace_term_is_passed_through():
    result = runner.invoke(main.app, ["search", " ", "--json"])
    assert result.exit_code == 0
    assert _FakeService.instances[0].payloads[0]["search_term"] == " "


@pytest.mark.parametrize(
    "args",
    [
        ["seed", "--rows=-5"],
        ["seed", "--rows=0"],
        ["benchmark", "--seed=-1"],
        ["matrix", "--rows=1000", "--rows=-10"],
    ],
)
def test_non_positive_row_counts_are_usage_errors(args, monkeypatch):
    built: List[str] = []

    class _HarnessFactory:
        @staticmethod
        def from_dsn(dsn: str | None = None) -> None:
            built.append("harness")

    monkeypatch.setattr(main, "BenchmarkHarness", _HarnessFactory)

    result = runner.invoke(main.app, args)

    assert result.exit_code == 2
    assert _FakeService.instances == []
    assert built == []
