"""Context object shared across worker threads."""

from dataclasses import dataclass

from webserver.bootstrap.config import ServerConfig
from webserver.pipeline.router import Router


@dataclass(frozen=True)
class WorkerContext:
    """Read-only dependencies every connection worker needs."""

    router: Router
    config: ServerConfig
