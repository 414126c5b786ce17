"""Socket input/output: request reading and response serialization."""

import logging
import socket
from typing import Optional

from webserver.bootstrap.config import MAX_BODY_BYTES
from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.domain.http_types import CONTENT_LENGTH, HttpRequest, HttpResponse
from webserver.pipeline.parsing import parse_request

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.io"), {})

CRLF = "\r\n"


def read_request(
    client_socket: socket.socket, max_body_bytes: int = MAX_BODY_BYTES
) -> Optional[HttpRequest]:
    """Parse a single request from the socket's input stream."""
    with client_socket.makefile("rb") as stream:
        request = parse_request(stream, max_body_bytes)
    if request is not None:
        IO_LOGGER.debug(
            "Parsed request",
            extra={
                "event": "request_parsed",
                "method": request.method,
                "path": request.path,
            },
        )
    return request


def serialize_head(response: HttpResponse) -> bytes:
    """Render the status line, headers and the blank separator line."""
    headers = dict(response.headers)
    if response.body is not None:
        for name in [name for name in headers if name.lower() == "content-length"]:
            del headers[name]
        headers[CONTENT_LENGTH] = str(len(response.body))

    lines = [response.status_line]
    lines.extend(f"{name}: {value}" for name, value in headers.items())
    return (CRLF.join(lines) + CRLF + CRLF).encode("utf-8")


def send_response(client_socket: socket.socket, response: HttpResponse) -> None:
    """Write the textual head completely, then the raw body bytes."""
    client_socket.sendall(serialize_head(response))
    if response.body:
        client_socket.sendall(response.body)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status_code": response.status_code,
            "bytes_out": len(response.body or b""),
        },
    )
