"""Composable asynchronous request pipes for ASGI servers."""

from httpipe.adapters import PipeMiddleware, as_asgi_app, from_asgi_app, from_endpoint
from httpipe.core import NOT_MATCHED, Matched, NotMatched, Pipe, Result, always, choose, compose, never
from httpipe.exceptions import (
    BodyReadError,
    BodyTooLargeError,
    HeadersSentError,
    HttpPipeError,
    PatternCompileError,
)
from httpipe.http import *  # noqa: F401,F403
from httpipe.http import __all__ as _http_all

__version__ = "0.1.0"

__all__ = [
    "NOT_MATCHED",
    "BodyReadError",
    "BodyTooLargeError",
    "HeadersSentError",
    "HttpPipeError",
    "Matched",
    "NotMatched",
    "PatternCompileError",
    "Pipe",
    "PipeMiddleware",
    "Result",
    "always",
    "as_asgi_app",
    "choose",
    "compose",
    "from_asgi_app",
    "from_endpoint",
    "never",
    *_http_all,
]
