"""Pure HTTP response builders."""

import html
import json
from typing import Any

from webserver.domain.http_types import HttpResponse

HTML_CONTENT_TYPE = "text/html; charset=UTF-8"
JSON_CONTENT_TYPE = "application/json"

STATUS_MESSAGES = {
    200: "OK",
    201: "Created",
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def _html_error(status_code: int, detail: str = "") -> HttpResponse:
    message = STATUS_MESSAGES[status_code]
    paragraph = f"<p>{html.escape(detail)}</p>" if detail else ""
    response = HttpResponse(status_code, message)
    response.set_header("Content-Type", HTML_CONTENT_TYPE)
    response.set_body(
        f"<html><body><h1>{status_code} - {message}</h1>{paragraph}</body></html>"
    )
    return response


def ok_response(body: bytes, content_type: str) -> HttpResponse:
    """Return a 200 response carrying raw bytes of the given type."""
    response = HttpResponse(200, STATUS_MESSAGES[200])
    response.set_header("Content-Type", content_type)
    response.set_body(body)
    return response


def json_response(payload: Any, status_code: int = 200) -> HttpResponse:
    """Serialize the payload as compact JSON."""
    response = HttpResponse(status_code, STATUS_MESSAGES[status_code])
    response.set_header("Content-Type", JSON_CONTENT_TYPE)
    response.set_body(json.dumps(payload, separators=(",", ":")))
    return response


def not_found_response() -> HttpResponse:
    return _html_error(404)


def bad_request_response(detail: str = "") -> HttpResponse:
    return _html_error(400, detail)


def method_not_allowed_response() -> HttpResponse:
    return _html_error(405)


def internal_error_response() -> HttpResponse:
    return _html_error(500)
