from __future__ import annotations

import json
import logging
import sys

import pytest

from app.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


def _record(level: int = logging.INFO, msg: str = "hello", *args, exc_info=None):
    return logging.LogRecord(
        name="app.test",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


@pytest.mark.parametrize(
    "name,expected",
    [("debug", logging.DEBUG), ("warning", logging.WARNING), ("nonexistent", logging.INFO)],
)
def test_setup_logging_sets_root_level(name: str, expected: int) -> None:
    setup_logging(name)
    assert logging.getLogger().level == expected


def test_setup_logging_keeps_uvicorn_at_warning_or_above() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_json_mode_installs_json_formatter() -> None:
    setup_logging("info", json_format=True)
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, _JsonFormatter)
    setup_logging("info")


def test_container_formatter_location_only_for_warnings() -> None:
    fmt = _ContainerFormatter()
    assert "[test.py:42]" not in fmt.format(_record(logging.INFO))
    assert "[test.py:42]" in fmt.format(_record(logging.WARNING, "bad thing"))


def test_json_formatter_fields() -> None:
    record = _record(logging.INFO, "Enrolled user=%d", 7)
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.path = "/api/enrollments"  # type: ignore[attr-defined]
    record.status_code = 201  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "app.test"
    assert parsed["message"] == "Enrolled user=7"
    assert parsed["request_id"] == "abc-123"
    assert parsed["path"] == "/api/enrollments"
    assert parsed["status_code"] == 201
    assert "method" not in parsed


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("store exploded")
    except ValueError:
        record = _record(logging.ERROR, "failed", exc_info=sys.exc_info())
    parsed = json.loads(_JsonFormatter().format(record))
    assert "ValueError: store exploded" in parsed["exception"]
