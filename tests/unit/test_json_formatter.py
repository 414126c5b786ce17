"""Unit tests for the JSON log formatter."""

import json
import logging
import sys

import pytest

from webserver.bootstrap.logging_setup import DATE_FORMAT, JsonFormatter


@pytest.fixture(name="json_formatter")
def json_formatter_fixture():
    return JsonFormatter(DATE_FORMAT)


def make_record(level=logging.INFO, exc_info=None, **attributes) -> logging.LogRecord:
    record = logging.LogRecord(
        name="webserver.transport.worker",
        level=level,
        pathname="worker.py",
        lineno=1,
        msg="Request served",
        args=(),
        exc_info=exc_info,
    )
    for key, value in attributes.items():
        setattr(record, key, value)
    return record


def test_basic_fields(json_formatter):
    record = make_record(correlation_id="abc-123", component="transport.worker")
    log_data = json.loads(json_formatter.format(record))

    assert log_data["level"] == "INFO"
    assert log_data["correlation_id"] == "abc-123"
    assert log_data["component"] == "transport.worker"
    assert log_data["message"] == "Request served"
    assert "timestamp" in log_data
    assert "event" not in log_data


def test_missing_context_uses_placeholders(json_formatter):
    log_data = json.loads(json_formatter.format(make_record()))
    assert log_data["correlation_id"] == "-"
    assert log_data["component"] == "unknown"


def test_whitelisted_extras_are_included(json_formatter):
    """Request and pool fields appear; unknown attributes are left out."""
    record = make_record(
        event="request_served",
        client="127.0.0.1:50123",
        method="GET",
        route="/api/status",
        status_code=200,
        duration_ms=1.25,
        active_workers=3,
        pending_connections=0,
        unrelated="ignored",
    )
    log_data = json.loads(json_formatter.format(record))

    assert log_data["event"] == "request_served"
    assert log_data["client"] == "127.0.0.1:50123"
    assert log_data["method"] == "GET"
    assert log_data["route"] == "/api/status"
    assert log_data["status_code"] == 200
    assert log_data["duration_ms"] == 1.25
    assert log_data["active_workers"] == 3
    assert log_data["pending_connections"] == 0
    assert "unrelated" not in log_data


def test_string_extras_are_redacted(json_formatter):
    record = make_record(error="bad token abc", port=8080)
    log_data = json.loads(json_formatter.format(record))
    assert log_data["error"] == "[REDACTED]"
    assert log_data["port"] == 8080


@pytest.mark.parametrize(
    "key, value",
    [
        ("path", "/monkey.png"),
        ("route", "GET:/keyboard.html"),
        ("path", "/assets/" + "a" * 40 + ".js"),
    ],
)
def test_request_targets_are_logged_verbatim(json_formatter, key, value):
    log_data = json.loads(json_formatter.format(make_record(**{key: value})))
    assert log_data[key] == value


def test_stable_key_ordering(json_formatter):
    record = make_record(event="route_matched", client="127.0.0.1:1", correlation_id="x")
    first = json_formatter.format(record)
    assert first == json_formatter.format(record)
    keys = list(json.loads(first))
    assert keys == sorted(keys)


def test_exception_is_rendered(json_formatter):
    try:
        raise ValueError("handler exploded")
    except ValueError:
        record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

    log_data = json.loads(json_formatter.format(record))
    assert "ValueError: handler exploded" in log_data["exception"]
