"""Worker logic for handling one client connection start to finish."""

import logging
import socket
import time

from webserver.domain.correlation_id import (
    CorrelationLoggerAdapter,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)
from webserver.domain.http_types import HttpRequest, HttpResponse
from webserver.pipeline.io import read_request, send_response
from webserver.transport.context import WorkerContext

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("webserver.transport.worker"), {}
)

REQUEST_ID_HEADER = "X-Request-ID"


def format_client(client_address) -> str:
    return f"{client_address[0]}:{client_address[1]}"


def abort_connection(client_socket: socket.socket) -> None:
    """Unblock any thread reading or writing the socket."""
    try:
        client_socket.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass


def discard_connection(client_socket: socket.socket) -> None:
    """Drop a connection that no worker ever picked up."""
    abort_connection(client_socket)
    client_socket.close()


def close_connection(client_socket: socket.socket) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()


def _adopt_request_id(request: HttpRequest) -> None:
    incoming_correlation_id = request.header(REQUEST_ID_HEADER)
    if incoming_correlation_id and incoming_correlation_id.isprintable():
        set_correlation_id(incoming_correlation_id)


def _log_served(
    request: HttpRequest, response: HttpResponse, client: str, started_ns: int
) -> None:
    WORKER_LOGGER.info(
        "Request served",
        extra={
            "event": "request_served",
            "client": client,
            "method": request.method,
            "route": request.path,
            "status_code": response.status_code,
            "duration_ms": round((time.monotonic_ns() - started_ns) / 1_000_000, 3),
        },
    )


def _serve_one(
    client_socket: socket.socket, client: str, context: WorkerContext
) -> None:
    started_ns = time.monotonic_ns()
    client_socket.settimeout(context.config.socket_timeout)
    request = read_request(client_socket, context.config.max_body_bytes)
    if request is None:
        WORKER_LOGGER.debug(
            "Connection dropped without a request",
            extra={"event": "connection_dropped", "client": client},
        )
        return

    _adopt_request_id(request)
    response = context.router.route_request(request)
    if response.get_header(REQUEST_ID_HEADER) is None:
        response.set_header(REQUEST_ID_HEADER, get_correlation_id() or "-")
    send_response(client_socket, response)
    _log_served(request, response, client, started_ns)


def handle_client(
    client_socket: socket.socket,
    client_address,
    context: WorkerContext,
) -> None:
    """Parse, route and answer a single request, then close the connection."""
    client = format_client(client_address)
    with correlation_scope():
        try:
            _serve_one(client_socket, client, context)
        except TimeoutError:
            WORKER_LOGGER.warning(
                "Client timed out",
                extra={
                    "event": "client_timeout",
                    "client": client,
                    "socket_timeout": context.config.socket_timeout,
                },
            )
        except OSError as error:
            WORKER_LOGGER.error(
                "Error handling client connection",
                extra={
                    "event": "connection_error",
                    "client": client,
                    "error_type": type(error).__name__,
                },
            )
        except Exception as error:  # pylint: disable=broad-except
            WORKER_LOGGER.error(
                "Unexpected error in worker",
                extra={
                    "event": "worker_error",
                    "client": client,
                    "error_type": type(error).__name__,
                    "error": str(error),
                },
                exc_info=True,
            )
        finally:
            close_connection(client_socket)
            WORKER_LOGGER.debug(
                "Socket closed", extra={"event": "socket_closed", "client": client}
            )
