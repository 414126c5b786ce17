"""Request routing: exact-match API table with static file fallback for GET."""

import logging
from types import MappingProxyType
from typing import Mapping, Optional

from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.domain.http_types import HttpRequest, HttpResponse
from webserver.domain.response_builders import (
    bad_request_response,
    internal_error_response,
    not_found_response,
    ok_response,
)
from webserver.domain.sandbox import ForbiddenPath
from webserver.domain.user_store import UserStore
from webserver.handlers.api_handlers import RouteHandler, build_api_routes
from webserver.handlers.file_handler import StaticFileNotFound, StaticFileServer

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("webserver.pipeline.router"), {}
)

INDEX_DOCUMENT = "/index.html"


def route_key(method: str, path: str) -> str:
    return f"{method}:{path}"


class Router:
    """Dispatches requests; the route table is frozen at construction."""

    def __init__(
        self, routes: Mapping[str, RouteHandler], static_files: StaticFileServer
    ) -> None:
        self._routes = MappingProxyType(dict(routes))
        self._static_files = static_files

    @property
    def routes(self) -> Mapping[str, RouteHandler]:
        return self._routes

    def route_request(self, request: HttpRequest) -> HttpResponse:
        """Route the request to the appropriate handler and return a response."""
        key = route_key(request.method, request.path)
        handler = self._routes.get(key)
        if handler is not None:
            if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ROUTER_LOGGER.debug(
                    "Route matched", extra={"event": "route_matched", "route": key}
                )
            return self._invoke(handler, request, key)

        if request.method.upper() == "GET":
            return self.serve_static(request.path)

        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.path,
                "method": request.method,
            },
        )
        return not_found_response()

    def _invoke(
        self, handler: RouteHandler, request: HttpRequest, key: str
    ) -> HttpResponse:
        try:
            return handler(request)
        except Exception as error:  # pylint: disable=broad-except
            ROUTER_LOGGER.error(
                "Route handler failed",
                extra={
                    "event": "handler_error",
                    "route": key,
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            return internal_error_response()

    def serve_static(self, path: str) -> HttpResponse:
        """Map the static file server's outcome onto a response."""
        if path == "/":
            path = INDEX_DOCUMENT
        try:
            content, content_type = self._static_files.read(path)
        except ForbiddenPath:
            ROUTER_LOGGER.warning(
                "Forbidden path access blocked",
                extra={"event": "forbidden_path", "path": path},
            )
            return bad_request_response("Invalid path")
        except StaticFileNotFound:
            ROUTER_LOGGER.info(
                "File not found", extra={"event": "file_not_found", "path": path}
            )
            return not_found_response()
        except OSError as error:
            ROUTER_LOGGER.error(
                "Static file read failed",
                extra={
                    "event": "file_read_error",
                    "path": path,
                    "error_type": type(error).__name__,
                },
            )
            return internal_error_response()
        return ok_response(content, content_type)


def create_router(directory: str, store: Optional[UserStore] = None) -> Router:
    """Build the router with the demo API routes and a static file root."""
    if store is None:
        store = UserStore()
    return Router(build_api_routes(store), StaticFileServer(directory))
