"""Server configuration and CLI argument parsing."""

import argparse
import logging
from dataclasses import dataclass
from typing import Optional

from webserver.domain.correlation_id import CorrelationLoggerAdapter

CONFIG_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.config"), {})

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_DIRECTORY = "public"
DEFAULT_WORKERS = 50
DEFAULT_BACKLOG = 1000
DEFAULT_SOCKET_TIMEOUT = 5.0
DEFAULT_SHUTDOWN_GRACE_SECONDS = 10.0
MAX_BODY_BYTES = 5 * 1024 * 1024


@dataclass
class ServerConfig:
    """Settings fixed at startup and shared read-only by every worker."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    directory: str = DEFAULT_DIRECTORY
    workers: int = DEFAULT_WORKERS
    backlog: int = DEFAULT_BACKLOG
    socket_timeout: float = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS
    max_body_bytes: int = MAX_BODY_BYTES


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Pooled HTTP server")
    parser.add_argument(
        "port",
        nargs="?",
        default=None,
        help=f"Port to listen on (default: {DEFAULT_PORT})",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument(
        "--directory",
        default=DEFAULT_DIRECTORY,
        help="Root directory for static files",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help="Number of worker threads processing connections",
    )
    parser.add_argument(
        "--backlog",
        type=int,
        default=DEFAULT_BACKLOG,
        help="Listen backlog and maximum queued connections",
    )
    parser.add_argument(
        "--socket-timeout",
        type=float,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Read timeout in seconds for each connection",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=float,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for in-flight connections on shutdown",
    )
    parser.add_argument(
        "--max-body-bytes",
        type=int,
        default=MAX_BODY_BYTES,
        help="Largest request body accepted before the connection is dropped",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default="stdout",
        help="stdout or a file path",
    )
    return parser.parse_args(argv)


def resolve_port(raw_port: Optional[str]) -> int:
    """Return the requested port, falling back to the default when invalid."""
    if raw_port is None:
        return DEFAULT_PORT
    try:
        port = int(raw_port)
    except ValueError:
        port = -1
    if not 0 < port < 65536:
        CONFIG_LOGGER.warning(
            "Invalid port number, using default",
            extra={
                "event": "invalid_port",
                "requested_port": raw_port,
                "port": DEFAULT_PORT,
            },
        )
        return DEFAULT_PORT
    return port


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Translate CLI arguments into a ServerConfig."""
    return ServerConfig(
        host=args.host,
        port=resolve_port(args.port),
        directory=args.directory,
        workers=max(1, args.workers),
        backlog=max(1, args.backlog),
        socket_timeout=args.socket_timeout,
        shutdown_grace_seconds=max(0.0, args.shutdown_grace_seconds),
        max_body_bytes=max(0, args.max_body_bytes),
    )
