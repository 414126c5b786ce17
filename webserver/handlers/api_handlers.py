"""Demo JSON API handlers: status, echo and users."""

import functools
import json
import logging
import os
import threading
import time
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.domain.http_types import HttpRequest, HttpResponse
from webserver.domain.response_builders import bad_request_response, json_response
from webserver.domain.user_store import UserStore

API_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.handlers.api"), {})

DEFAULT_ECHO_MESSAGE = "Hello from the server!"

RouteHandler = Callable[[HttpRequest], HttpResponse]


def handle_status(request: HttpRequest, started_at: float) -> HttpResponse:
    """Report that the server is running along with basic process figures."""
    del request
    uptime_ms = int((time.monotonic() - started_at) * 1000)
    return json_response(
        {
            "status": "running",
            "uptime": uptime_ms,
            "processors": os.cpu_count() or 1,
            "threads": threading.active_count(),
        }
    )


def handle_echo(request: HttpRequest) -> HttpResponse:
    message = request.query_param("message")
    if message is None:
        message = DEFAULT_ECHO_MESSAGE
    return json_response({"echo": message})


def handle_echo_post(request: HttpRequest) -> HttpResponse:
    if not request.body:
        return bad_request_response("No body provided")
    return json_response({"received": request.body.decode("utf-8", "replace")})


def handle_list_users(request: HttpRequest, store: UserStore) -> HttpResponse:
    del request
    return json_response([user.to_dict() for user in store.list_users()])


def handle_create_user(request: HttpRequest, store: UserStore) -> HttpResponse:
    """Create a user from a JSON object carrying string name and email fields."""
    if not request.body:
        return bad_request_response("No body provided")
    try:
        payload = json.loads(request.body)
    except ValueError:
        return bad_request_response("Body must be valid JSON")

    if not isinstance(payload, dict):
        return bad_request_response("Name and email required")
    name = payload.get("name")
    email = payload.get("email")
    if not (isinstance(name, str) and name and isinstance(email, str) and email):
        return bad_request_response("Name and email required")

    user = store.create(name, email)
    API_LOGGER.info(
        "User created", extra={"event": "user_created", "user_id": user.id}
    )
    return json_response(user.to_dict(), status_code=201)


def build_api_routes(
    store: UserStore, started_at: Optional[float] = None
) -> Mapping[str, RouteHandler]:
    """Return the fixed route table keyed by ``METHOD:PATH``."""
    if started_at is None:
        started_at = time.monotonic()
    return MappingProxyType(
        {
            "GET:/api/status": functools.partial(handle_status, started_at=started_at),
            "GET:/api/echo": handle_echo,
            "POST:/api/echo": handle_echo_post,
            "GET:/api/users": functools.partial(handle_list_users, store=store),
            "POST:/api/users": functools.partial(handle_create_user, store=store),
        }
    )
