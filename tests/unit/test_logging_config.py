"""Tests for logging configuration helpers."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from webserver.bootstrap.logging_setup import (
    LOGGER_NAME,
    CorrelationIdFilter,
    configure_logging,
    redact_sensitive,
)


@pytest.fixture(autouse=True)
def restore_project_logger():
    """Undo handler and level changes made by configure_logging."""
    logger = logging.getLogger(LOGGER_NAME)
    old_level = logger.level
    old_handlers = list(logger.handlers)
    yield
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)


def test_configure_logging_stream_handler():
    """Configure stdout handler and validate formatter output."""
    logger = configure_logging("DEBUG", "stdout")

    assert logger.logger.name == "webserver"
    assert logger.logger.level == logging.DEBUG
    assert len(logger.logger.handlers) == 1

    handler = logger.logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    formatter = handler.formatter
    assert formatter is not None
    record = logging.LogRecord(
        name="webserver.transport.worker",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=0,
        msg="format test",
        args=(),
        exc_info=None,
    )
    record.correlation_id = "test-id-123"
    record.component = "transport.worker"
    log_data = json.loads(formatter.format(record))
    assert log_data["component"] == "transport.worker"
    assert log_data["message"] == "format test"
    assert log_data["correlation_id"] == "test-id-123"


def test_configure_logging_file_destination(tmp_path: Path):
    """Configure file handler and verify writes are persisted."""
    destination = tmp_path / "logs" / "server.log"
    logger = configure_logging("WARNING", destination.as_posix())

    assert logger.logger.level == logging.WARNING
    handler = logger.logger.handlers[0]
    assert handler.baseFilename == destination.as_posix()

    logging.getLogger("webserver.server").warning("file log test")

    handler.flush()
    assert "file log test" in destination.read_text()


def test_configure_logging_replaces_previous_handlers(tmp_path: Path):
    configure_logging("INFO", (tmp_path / "first.log").as_posix())
    logger = configure_logging("INFO", "stdout")
    assert len(logger.logger.handlers) == 1
    assert not hasattr(logger.logger.handlers[0], "baseFilename")


def test_plain_text_format_includes_correlation_placeholder(tmp_path: Path):
    destination = tmp_path / "plain.log"
    logger = configure_logging("INFO", destination.as_posix(), use_json=False)
    logging.getLogger("webserver.server").info("plain record")
    logger.logger.handlers[0].flush()
    assert "INFO [-] webserver.server :: plain record" in destination.read_text()


def test_unknown_level_defaults_to_info():
    logger = configure_logging("CHATTY", "stdout")
    assert logger.logger.level == logging.INFO


def test_correlation_id_filter_inserts_placeholder_when_missing():
    """Filter should default correlation_id to '-' for bare records."""
    log_filter = CorrelationIdFilter()
    record = logging.LogRecord(
        name="webserver.server",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="missing id",
        args=(),
        exc_info=None,
    )

    assert not hasattr(record, "correlation_id")
    assert log_filter.filter(record)
    assert record.correlation_id == "-"


def test_configure_logging_emits_event():
    """configure_logging announces the destination and level it applied."""
    with patch("webserver.bootstrap.logging_setup._build_handler") as mock_build:
        mock_handler = MagicMock()
        mock_handler.level = logging.INFO
        mock_build.return_value = mock_handler

        configure_logging("INFO", "stdout")

        assert mock_handler.handle.called
        record = mock_handler.handle.call_args[0][0]

        assert record.msg == "Logging configured"
        assert record.levelno == logging.INFO
        assert getattr(record, "event", None) == "logging_configured"
        assert getattr(record, "log_destination", None) == "stdout"
        assert getattr(record, "log_level", None) == "INFO"


@pytest.mark.parametrize(
    "value",
    [
        "Authorization: Bearer token123",
        "api_key=secret",
        "password=secret123",
        "0123456789abcdef0123456789abcdef",
        "YWJjZGVmZ2hpamtsbW5vcHFyc3R1dnd4eXo=",
    ],
)
def test_sensitive_values_are_redacted(value: str):
    assert redact_sensitive(value) == "[REDACTED]"


@pytest.mark.parametrize(
    "value", ["127.0.0.1:50123", "/index.html", "request_served", "", None]
)
def test_safe_values_pass_through(value):
    assert redact_sensitive(value) == value
