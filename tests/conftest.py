"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Generator

import pytest

from tests.utils.http import reserve_port
from tests.utils.process import PROJECT_ROOT, ServerProcessInfo, launch_server

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture(name="static_root")
def _static_root(tmp_path_factory: "TempPathFactory") -> Path:
    """A static directory holding an index page and a stylesheet."""

    directory = tmp_path_factory.mktemp("static")
    (directory / "index.html").write_text("<h1>Hello</h1>")
    (directory / "style.css").write_text("body { color: black; }")
    return directory


@pytest.fixture(name="log_file")
def _log_file(tmp_path_factory: "TempPathFactory") -> Path:
    return tmp_path_factory.mktemp("logs") / "server.log"


@pytest.fixture(name="server_process")
def _server_process(
    static_root: Path, log_file: Path
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the server in a background process for integration tests."""

    host = "127.0.0.1"
    port = reserve_port(host)
    extra_args = ["--socket-timeout", "1", "--shutdown-grace-seconds", "5"]
    yield from launch_server(host, port, static_root, log_file, extra_args)


@pytest.fixture()
def base_url(server_process: ServerProcessInfo) -> str:
    """Expose the running server base URL to integration tests."""

    return server_process["base_url"]
