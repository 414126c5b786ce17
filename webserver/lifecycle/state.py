"""Server lifecycle state management."""

import logging
import threading

from webserver.domain.correlation_id import CorrelationLoggerAdapter

LIFECYCLE_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.lifecycle"), {})


class ServerLifecycle:
    """Stop flag shared by the signal handlers and the accept loop."""

    def __init__(self) -> None:
        self._stop_event = threading.Event()
        self._listening_event = threading.Event()

    def should_stop(self) -> bool:
        """Check if the server should stop accepting new connections."""
        return self._stop_event.is_set()

    def begin_shutdown(self) -> None:
        """Ask the accept loop to stop; in-flight work is drained afterwards."""
        if not self._stop_event.is_set():
            LIFECYCLE_LOGGER.info(
                "Beginning graceful shutdown", extra={"event": "shutdown_requested"}
            )
        self._stop_event.set()

    def mark_listening(self) -> None:
        self._listening_event.set()

    def wait_until_listening(self, timeout: float) -> bool:
        """Block until the accept loop has started, used by embedding code and tests."""
        return self._listening_event.wait(timeout)
