from __future__ import annotations

import json
import logging

from logbench.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_ROWS = 1000
EXPECTED_BATCH = 3


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.stage = "seed"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["stage"] == "seed"
    assert "pathname" not in payload


def test_json_formatter_includes_logger_extra_mapping() -> None:
    logger = logging.getLogger("logbench.loader")
    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        __file__,
        1,
        "Progress",
        (),
        None,
        extra={"batch": EXPECTED_BATCH, "rows": EXPECTED_ROWS},
    )

    payload = json.loads(_json_formatter(record))

    assert payload["batch"] == EXPECTED_BATCH
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["logger"] == "logbench.loader"


def test_json_formatter_stringifies_non_json_values() -> None:
    record = _record()
    record.path = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["path"].startswith("<object object")


def test_json_formatter_keeps_multibyte_text() -> None:
    payload = json.loads(_json_formatter(_record("ログイン失敗")))
    assert payload["message"] == "ログイン失敗"


def test_configure_logging_without_force_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    sentinel = logging.NullHandler()
    saved = root.handlers[:]
    root.handlers = [sentinel]
    try:
        configure_logging(level="DEBUG", json_logs=True, force=False)
        assert root.handlers == [sentinel]
    finally:
        root.handlers = saved
