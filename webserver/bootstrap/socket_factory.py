"""Listening socket creation."""

import logging
import socket

from webserver.domain.correlation_id import CorrelationLoggerAdapter

SOCKET_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.socket"), {})

ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(host: str, port: int, backlog: int) -> socket.socket:
    """Bind and listen; accept() wakes up periodically to observe shutdown."""
    server_socket = socket.create_server((host, port), backlog=backlog)
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    SOCKET_LOGGER.debug(
        "Listening socket bound",
        extra={
            "event": "socket_bound",
            "host": host,
            "port": server_socket.getsockname()[1],
            "backlog": backlog,
        },
    )
    return server_socket
