"""Unit tests for sandboxed static file reads and content types."""

from pathlib import Path

import pytest

from webserver.domain.sandbox import ForbiddenPath, resolve_sandbox_path
from webserver.handlers.content_types import DEFAULT_CONTENT_TYPE, content_type_for
from webserver.handlers.file_handler import StaticFileNotFound, StaticFileServer


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/index.html", "text/html; charset=UTF-8"),
        ("/page.htm", "text/html; charset=UTF-8"),
        ("/style.css", "text/css"),
        ("/app.js", "application/javascript"),
        ("/data.json", "application/json"),
        ("/logo.png", "image/png"),
        ("/photo.jpg", "image/jpeg"),
        ("/photo.JPEG", "image/jpeg"),
        ("/anim.gif", "image/gif"),
        ("/icon.svg", "image/svg+xml"),
        ("/favicon.ico", "image/x-icon"),
        ("/archive.tar.gz", DEFAULT_CONTENT_TYPE),
        ("/README", DEFAULT_CONTENT_TYPE),
    ],
)
def test_content_type_for(path: str, expected: str) -> None:
    assert content_type_for(path) == expected


def test_read_returns_bytes_and_type(tmp_path: Path) -> None:
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    content, content_type = StaticFileServer(str(tmp_path)).read("/assets/logo.png")
    assert content == b"\x89PNG\r\n\x1a\n"
    assert content_type == "image/png"


def test_read_missing_file_and_directory_raise_not_found(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    server = StaticFileServer(str(tmp_path))
    with pytest.raises(StaticFileNotFound):
        server.read("/absent.txt")
    with pytest.raises(StaticFileNotFound):
        server.read("/sub")


@pytest.mark.parametrize(
    "user_path",
    ["/../../etc/passwd", "/sub/../../secret", "/..", "/with\x00nul", "/"],
)
def test_sandbox_rejects_escaping_paths(tmp_path: Path, user_path: str) -> None:
    with pytest.raises(ForbiddenPath):
        resolve_sandbox_path(str(tmp_path), user_path)


def test_sandbox_rejects_symlink_escape(tmp_path: Path) -> None:
    outside = tmp_path / "outside.txt"
    outside.write_text("secret")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link.txt").symlink_to(outside)
    with pytest.raises(ForbiddenPath):
        StaticFileServer(str(root)).read("/link.txt")


def test_sandbox_resolves_inside_root(tmp_path: Path) -> None:
    resolved = resolve_sandbox_path(str(tmp_path), "/a/b.txt")
    assert resolved == tmp_path.resolve() / "a" / "b.txt"


def test_sandbox_normalizes_dot_segments_that_stay_inside(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("home")
    server = StaticFileServer(str(tmp_path))
    assert server.read("/sub/../index.html") == (b"home", "text/html; charset=UTF-8")
    assert resolve_sandbox_path(str(tmp_path), "/a/./b/../c.txt") == (
        tmp_path.resolve() / "a" / "c.txt"
    )
