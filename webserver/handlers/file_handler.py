"""Static file serving from a sandboxed root directory."""

import logging

from webserver.domain.correlation_id import CorrelationLoggerAdapter
from webserver.domain.sandbox import resolve_sandbox_path
from webserver.handlers.content_types import content_type_for

FILE_LOGGER = CorrelationLoggerAdapter(logging.getLogger("webserver.handlers.file"), {})


class StaticFileNotFound(Exception):
    """Raised when the requested file does not exist or is a directory."""


class StaticFileServer:
    """Resolves request paths to file contents below a root directory.

    ``read`` raises ``ForbiddenPath`` for paths escaping the root,
    ``StaticFileNotFound`` for missing files and lets any other ``OSError``
    propagate; mapping those to responses is the router's job.
    """

    def __init__(self, directory: str) -> None:
        self.directory = directory

    def read(self, path: str) -> tuple[bytes, str]:
        """Return the file's bytes and its content type."""
        resolved_path = resolve_sandbox_path(self.directory, path)
        if not resolved_path.is_file():
            raise StaticFileNotFound(path)
        content = resolved_path.read_bytes()
        if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
            FILE_LOGGER.debug(
                "File read complete",
                extra={
                    "event": "file_read_complete",
                    "path": resolved_path.as_posix(),
                    "bytes_out": len(content),
                },
            )
        return content, content_type_for(path)
