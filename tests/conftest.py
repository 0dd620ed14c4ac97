from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import unquote

import pytest
from httpipe.http.context import HttpContext, create_http_context
from starlette.types import Message, Receive, Scope


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: bytes = b"",
    headers: Optional[Iterable[Tuple[str, str]]] = None,
    http_version: str = "1.1",
) -> Scope:
    """Builds an HTTP scope. `path` is given as sent on the wire (percent-encoded)."""
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": http_version,
        "method": method,
        "scheme": "http",
        "path": unquote(path),
        "raw_path": path.encode("latin-1"),
        "query_string": query_string,
        "root_path": "",
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in (headers or [])],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }


def make_receive(chunks: Optional[List[bytes]] = None, disconnect: bool = False) -> Receive:
    """Builds a receive callable that yields `chunks` as the request body, or a disconnect."""
    messages: List[Message] = []
    if disconnect:
        messages.append({"type": "http.disconnect"})
    else:
        body_chunks = chunks or [b""]
        for i, chunk in enumerate(body_chunks):
            messages.append({"type": "http.request", "body": chunk, "more_body": i < len(body_chunks) - 1})

    async def receive() -> Message:
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


@pytest.fixture
def make_context() -> Callable[..., HttpContext]:
    """Provides a factory for HttpContext instances over an in-memory request."""

    def _make_context(
        method: str = "GET",
        path: str = "/",
        query_string: bytes = b"",
        headers: Optional[Iterable[Tuple[str, str]]] = None,
        http_version: str = "1.1",
        body: Optional[bytes] = None,
        chunks: Optional[List[bytes]] = None,
        disconnect: bool = False,
    ) -> HttpContext:
        scope = make_scope(method, path, query_string, headers, http_version)
        if body is not None:
            chunks = [body]
        return create_http_context(scope, make_receive(chunks, disconnect))

    return _make_context


@pytest.fixture
def context(make_context) -> HttpContext:
    """A plain GET / context."""
    return make_context()


@pytest.fixture(autouse=True)
def clear_httpipe_env(monkeypatch):
    """AUTOUSE: keeps tests independent of the developer's environment and .env file."""
    for var in [
        "HTTPIPE_HOST",
        "HTTPIPE_PORT",
        "HTTPIPE_RELOAD",
        "HTTPIPE_APP",
        "HTTPIPE_MAX_BODY_SIZE",
        "LOG_LEVEL",
        "RUN_MODE",
    ]:
        monkeypatch.delenv(var, raising=False)
