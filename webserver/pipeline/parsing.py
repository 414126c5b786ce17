"""Request parsing: request line, headers and an optional length-delimited body."""

import logging
from typing import BinaryIO, Optional

from webserver.bootstrap.config import MAX_BODY_BYTES
from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.domain.http_types import HttpRequest

PARSER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.parser"), {})

MAX_LINE_BYTES = 8192
MAX_HEADER_LINES = 100
BODY_CHUNK_BYTES = 64 * 1024
HEADER_ENCODING = "iso-8859-1"


class MalformedRequest(ValueError):
    """Raised when the byte stream cannot be turned into a request."""


def read_line(stream: BinaryIO, limit: int = MAX_LINE_BYTES) -> Optional[str]:
    """Read one CRLF or LF terminated line; None at end of stream.

    ``limit`` applies to the line content, so the terminator never counts.
    """
    raw = stream.readline(limit + 2)
    if not raw:
        return None
    line = raw
    if line.endswith(b"\n"):
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
    if len(line) > limit:
        raise MalformedRequest("Line exceeds maximum length")
    return line.decode(HEADER_ENCODING)


def parse_query_string(query_string: str) -> dict[str, str]:
    """Split on '&' then on the first '='; pairs without a key are skipped."""
    params: dict[str, str] = {}
    for pair in query_string.split("&"):
        key, separator, value = pair.partition("=")
        if not separator or not key:
            continue
        params[key] = value
    return params


def parse_request_line(
    request_line: str,
) -> tuple[str, str, str, dict[str, str]]:
    """Return method, path, version and query parameters."""
    parts = request_line.split(" ")
    while parts and not parts[-1]:
        parts.pop()
    if len(parts) != 3:
        raise MalformedRequest("Invalid request line")
    method, target, version = parts

    path, separator, query_string = target.partition("?")
    query_params = parse_query_string(query_string) if separator else {}
    return method, path, version, query_params


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Convert raw header lines into a lowercase-keyed dictionary."""
    parsed = {}
    for line in lines:
        colon_index = line.find(":")
        if colon_index <= 0:
            continue
        name = line[:colon_index].strip().lower()
        parsed[name] = line[colon_index + 1 :].strip()
    return parsed


def read_header_lines(stream: BinaryIO) -> list[str]:
    """Collect header lines up to the blank separator line or end of stream."""
    lines = []
    while True:
        line = read_line(stream)
        if not line:
            return lines
        if len(lines) >= MAX_HEADER_LINES:
            raise MalformedRequest("Too many header lines")
        lines.append(line)


def determine_content_length(headers: dict[str, str]) -> Optional[int]:
    """Return the declared body length, or None when absent or unusable."""
    header_value = headers.get("content-length")
    if header_value is None:
        return None
    if not (header_value.isascii() and header_value.isdigit()):
        PARSER_LOGGER.debug(
            "Ignoring invalid Content-Length",
            extra={"event": "invalid_content_length", "content_length": header_value},
        )
        return None
    return int(header_value)


def read_body(stream: BinaryIO, content_length: int) -> Optional[bytes]:
    """Read up to content_length bytes; a short stream yields what arrived."""
    chunks = []
    remaining = content_length
    while remaining > 0:
        chunk = stream.read(min(remaining, BODY_CHUNK_BYTES))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    body = b"".join(chunks)
    return body or None


def parse_request(
    stream: BinaryIO, max_body_bytes: int = MAX_BODY_BYTES
) -> Optional[HttpRequest]:
    """Parse one request from the stream; None means the connection is dropped."""
    try:
        request_line = read_line(stream)
        if not request_line:
            return None
        method, path, version, query_params = parse_request_line(request_line)
        headers = parse_headers(read_header_lines(stream))
    except MalformedRequest as error:
        PARSER_LOGGER.debug(
            "Malformed request",
            extra={"event": "malformed_request", "error": str(error)},
        )
        return None

    body = None
    if method.upper() == "POST":
        content_length = determine_content_length(headers)
        if content_length is not None:
            if content_length > max_body_bytes:
                PARSER_LOGGER.warning(
                    "Request body size exceeded limit",
                    extra={
                        "event": "body_size_exceeded",
                        "content_length": content_length,
                        "limit": max_body_bytes,
                    },
                )
                return None
            body = read_body(stream, content_length)

    return HttpRequest(method, path, version, headers, query_params, body)
