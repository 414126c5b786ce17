"""Pooled HTTP server entry point."""

import logging
import signal
import sys

from webserver.bootstrap.config import build_config, parse_cli_args
from webserver.bootstrap.logging_setup import configure_logging
from webserver.bootstrap.socket_factory import create_server_socket
from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.lifecycle.state import ServerLifecycle
from webserver.transport.accept_loop import serve

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.server"), {})


def main(argv=None) -> int:
    """Start the server and block until a shutdown signal has been handled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination)
    config = build_config(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "signal_received", "signal": signum},
        )
        lifecycle.begin_shutdown()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.directory,
            "workers": config.workers,
            "backlog": config.backlog,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
        },
    )
    try:
        server_socket = create_server_socket(config.host, config.port, config.backlog)
    except OSError as error:
        SERVER_LOGGER.critical(
            "Failed to start server",
            extra={
                "event": "bind_failed",
                "host": config.host,
                "port": config.port,
                "error": str(error),
            },
        )
        return 1

    serve(server_socket, config, lifecycle)
    return 0


if __name__ == "__main__":
    sys.exit(main())
