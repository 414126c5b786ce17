"""Main connection acceptance loop."""

import functools
import logging
import socket
from typing import Optional

from webserver.bootstrap.config import ServerConfig
from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.lifecycle.state import ServerLifecycle
from webserver.pipeline.router import Router, create_router
from webserver.transport.context import WorkerContext
from webserver.transport.worker import (
    abort_connection,
    discard_connection,
    format_client,
    handle_client,
)
from webserver.transport.worker_pool import PoolClosed, WorkerPool

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("webserver.transport.accept"), {}
)


def _dispatch(
    pool: WorkerPool,
    client_socket: socket.socket,
    client_address,
    context: WorkerContext,
) -> None:
    """Hand an accepted connection to the pool without processing it."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": format_client(client_address),
                "active_workers": pool.active_count(),
                "pending_connections": pool.pending_count(),
            },
        )
    try:
        pool.submit(
            handle_client,
            client_socket,
            client_address,
            context,
            on_abort=functools.partial(abort_connection, client_socket),
            on_discard=functools.partial(discard_connection, client_socket),
        )
    except PoolClosed:
        client_socket.close()
        raise


def serve(
    server_socket: socket.socket,
    config: ServerConfig,
    lifecycle: ServerLifecycle,
    router: Optional[Router] = None,
) -> bool:
    """Accept until the lifecycle says stop, then drain the worker pool.

    Returns True when every connection finished within the grace period.
    """
    if router is None:
        router = create_router(config.directory)
    context = WorkerContext(router=router, config=config)
    pool = WorkerPool(config.workers, queue_size=config.backlog)
    pool.start()

    host, port = server_socket.getsockname()[:2]
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": host,
            "port": port,
            "workers": pool.size,
            "backlog": config.backlog,
        },
    )
    lifecycle.mark_listening()

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            _dispatch(pool, client_socket, client_address, context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
                "active_workers": pool.active_count(),
                "pending_connections": pool.pending_count(),
            },
        )
        drained = pool.shutdown(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info("Server shutdown complete", extra={"event": "server_stopped"})
    return drained

