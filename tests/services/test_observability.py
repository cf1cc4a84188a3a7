"""Structured Logging — tests for the JSON formatter and idempotent setup."""

import json
import logging
import sys

from tripintake.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "tripintake.test", logging.WARNING, __file__, 1, "Trip %s rejected", ("t-1",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_line_has_core_fields():
    line = json.loads(JSONFormatter().format(_record()))
    assert line["level"] == "WARNING"
    assert line["logger"] == "tripintake.test"
    assert line["message"] == "Trip t-1 rejected"
    assert "timestamp" in line


def test_extra_fields_surfaced_when_present():
    line = json.loads(JSONFormatter().format(
        _record(identity="user-1", reason="rate_limited", status_code=429, unrelated="x"),
    ))
    assert line["identity"] == "user-1"
    assert line["reason"] == "rate_limited"
    assert line["status_code"] == 429
    assert "unrelated" not in line
    assert "trip_id" not in line


def test_exception_rendered():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    line = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in line["exception"]


def test_setup_logging_is_idempotent():
    before = len(logging.root.handlers)
    setup_logging("DEBUG", "json")
    setup_logging("INFO", "text")
    try:
        assert len(logging.root.handlers) == before + 1
        assert logging.root.level == logging.INFO
        assert not isinstance(logging.root.handlers[-1].formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(logging.root.handlers[-1])
