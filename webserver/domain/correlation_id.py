"""Connection correlation ID management using contextvars."""

import contextlib
import contextvars
import logging
import uuid
from typing import Any, Iterator, MutableMapping, Optional

LOGGER_PREFIX = "webserver."

_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)


def generate_correlation_id() -> str:
    """Generate a new correlation ID using UUID4."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Retrieve the current correlation ID from context."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Store a correlation ID in the current context."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Remove the correlation ID from the current context."""
    _correlation_id_var.set(None)


@contextlib.contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of one connection.

    The previous value is restored on exit, even if the ID was replaced
    inside the block.
    """
    if correlation_id is None:
        correlation_id = generate_correlation_id()
    token = _correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id_var.reset(token)


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects correlation ID and component into log records."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        else:
            kwargs["extra"] = dict(kwargs["extra"])

        correlation_id = get_correlation_id()
        kwargs["extra"]["correlation_id"] = (
            correlation_id if correlation_id is not None else "-"
        )

        logger_name = self.logger.name
        if logger_name.startswith(LOGGER_PREFIX):
            component = logger_name[len(LOGGER_PREFIX) :]
        else:
            component = logger_name
        kwargs["extra"]["component"] = component

        return msg, kwargs
