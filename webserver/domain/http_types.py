"""Request and response types shared across the pipeline."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

HTTP_VERSION = "HTTP/1.1"
SERVER_NAME = "webserver/1.0"
CONTENT_LENGTH = "Content-Length"


def default_headers() -> dict[str, str]:
    """Headers every response carries unless a handler overrides them."""
    return {"Server": SERVER_NAME, "Connection": "close"}


@dataclass(frozen=True)
class HttpRequest:
    """A parsed request. Header names are stored lower-cased."""

    method: str
    path: str
    version: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        normalized = {name.lower(): value for name, value in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(normalized))
        object.__setattr__(
            self, "query_params", MappingProxyType(dict(self.query_params))
        )

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def query_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.query_params.get(name, default)

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.version}"


@dataclass
class HttpResponse:
    """A response built by a handler and serialized exactly once."""

    status_code: int
    status_message: str
    headers: dict[str, str] = field(default_factory=default_headers)
    body: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.body is not None:
            self.set_body(self.body)

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.status_code} {self.status_message}"

    def get_header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any existing entry regardless of case."""
        lowered = name.lower()
        for key in [key for key in self.headers if key.lower() == lowered]:
            del self.headers[key]
        self.headers[name] = value

    def set_body(self, body: Union[bytes, str]) -> None:
        """Attach a body and recompute Content-Length from its byte length."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.body = body
        self.set_header(CONTENT_LENGTH, str(len(body)))
