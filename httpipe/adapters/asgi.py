"""Bridges between pipes and ASGI hosts.

Inbound: `as_asgi_app` serves a pipe as a standalone ASGI application and
`PipeMiddleware` mounts one in front of a Starlette/FastAPI app. Outbound:
`from_asgi_app` and `from_endpoint` embed foreign handlers inside a pipe.
"""

import inspect
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional, Union

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.errors import ServerErrorMiddleware
from starlette.middleware.exceptions import ExceptionMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from httpipe.core.logging import log_pipe_outcome
from httpipe.core.result import Matched, is_matched
from httpipe.exceptions import HttpPipeError
from httpipe.http.context import HttpContext, HttpPipe, create_http_context
from httpipe.settings import Settings

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Union[Response, Awaitable[Response]]]

# Headers that may repeat: a foreign app's values for these are appended to
# earlier ones. Any other header it sends replaces the earlier values.
LIST_HEADERS = frozenset({"set-cookie", "vary", "link", "via", "warning", "www-authenticate", "cache-control"})


def build_response(context: HttpContext) -> Response:
    """Converts the context's response sink into a Starlette response.

    ASGI has no place for a reason phrase, so only the status code is kept.
    Content-Length is computed from the buffered body unless a pipe set it.
    """
    sink = context.response
    response = Response(content=bytes(sink.body), status_code=sink.status_code)
    for key, value in sink.headers.items():
        if key == "content-length":
            response.headers[key] = value
        else:
            response.headers.append(key, value)
    return response


async def run_pipe(pipe: HttpPipe, context: HttpContext) -> bool:
    """
    Runs the top-level pipe for one exchange.

    Args:
        pipe: The pipe to run.
        context: The exchange's context.

    Returns:
        True if the pipe matched, False if it declined.

    Raises:
        Exception: Propagates any exception raised by the pipe.
    """
    exchange_id = str(context.exchange_id)
    details = {"method": context.request.method, "path": context.request.scope.get("path")}
    start_time = time.time()
    try:
        matched = is_matched(await pipe(context))
    except Exception as e:
        log_pipe_outcome(
            exchange_id,
            "error",
            duration=time.time() - start_time,
            error=str(e),
            details={**details, "error_type": e.__class__.__name__},
        )
        raise
    log_pipe_outcome(
        exchange_id,
        "matched" if matched else "not_matched",
        duration=time.time() - start_time,
        details=details,
    )
    return matched


async def pipe_error_handler(request: Request, exc: Exception) -> Response:
    """Renders an HttpPipeError as a JSON error response with the error's status code."""
    status_code = getattr(exc, "status_code", None) or 500
    detail = str(getattr(exc, "detail", None) or exc)
    logger.warning(
        f"Pipe error for {request.method} {request.url.path}: {detail}",
        extra={"error_type": exc.__class__.__name__, "status_code": status_code},
    )
    content = {"detail": detail}
    if Settings().dev_mode():
        content["error_type"] = exc.__class__.__name__
    return JSONResponse(status_code=status_code, content=content)


async def _lifespan(receive: Receive, send: Send) -> None:
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return


class PipeApp:
    """
    An ASGI application that serves a single pipe.

    Attributes:
        pipe: The top-level pipe, run once per HTTP exchange.
        fallback: The ASGI app that handles exchanges the pipe declines.
    """

    def __init__(self, pipe: HttpPipe, fallback: Optional[ASGIApp] = None):
        self.pipe = pipe
        self.fallback = fallback or PlainTextResponse("Not Found", status_code=404)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"PipeApp only serves HTTP, got scope type '{scope['type']}'")

        context = create_http_context(scope, receive)
        if await run_pipe(self.pipe, context):
            await build_response(context)(scope, receive, send)
        else:
            logger.debug(f"[{context.exchange_id}] No pipe matched, using fallback")
            await self.fallback(scope, receive, send)


def as_asgi_app(pipe: HttpPipe, fallback: Optional[ASGIApp] = None, debug: Optional[bool] = None) -> ASGIApp:
    """
    Wraps a pipe as a standalone ASGI application.

    HttpPipeError failures are rendered by `pipe_error_handler`; any other
    exception becomes a 500 from Starlette's ServerErrorMiddleware.

    Args:
        pipe: The top-level pipe.
        fallback: Handles declined exchanges. Defaults to a plain 404.
        debug: Show tracebacks on 500 pages. Defaults to RUN_MODE=dev.
    """
    if debug is None:
        debug = Settings().dev_mode()
    app: ASGIApp = PipeApp(pipe, fallback)
    app = ExceptionMiddleware(app, handlers={HttpPipeError: pipe_error_handler}, debug=debug)
    return ServerErrorMiddleware(app, debug=debug)


class PipeMiddleware(BaseHTTPMiddleware):
    """Runs a pipe in front of the wrapped app, which only sees the exchanges the pipe declines.

    Errors raised by the pipe propagate to the host's server error handling.
    """

    def __init__(self, app: ASGIApp, pipe: HttpPipe):
        super().__init__(app)
        self.pipe = pipe

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        context = HttpContext(request=request)
        if await run_pipe(self.pipe, context):
            return build_response(context)
        return await call_next(request)


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def replay() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


def from_asgi_app(app: ASGIApp) -> HttpPipe:
    """
    Embeds an ASGI application as a pipe.

    The app's response is captured into the context's response sink. The pipe
    always matches when the app returns normally; exceptions propagate.

    Args:
        app: Any ASGI application handling HTTP scopes.
    """

    async def pipe(context: HttpContext):
        request = context.request
        receive = request.receive
        if context.request_body is not None:
            receive = _replay_receive(context.request_body, receive)

        async def send(message: Message) -> None:
            if message["type"] == "http.response.start":
                received: Dict[str, List[str]] = {}
                for key, value in message.get("headers", []):
                    name = key.decode("latin-1").lower()
                    if name != "content-length":
                        received.setdefault(name, []).append(value.decode("latin-1"))
                for name, values in received.items():
                    if name in LIST_HEADERS:
                        context.response.add_header(name, values)
                    else:
                        context.response.set_header(name, values)
                context.response.write_head(message["status"])
            elif message["type"] == "http.response.body":
                context.response.write(message.get("body", b""))

        await app(request.scope, receive, send)
        return Matched(context)

    return pipe


def from_endpoint(endpoint: Endpoint) -> HttpPipe:
    """Embeds a Starlette-style endpoint `(request) -> Response` as a pipe.

    Synchronous endpoints run in Starlette's thread pool.
    """
    is_async = inspect.iscoroutinefunction(endpoint)

    async def pipe(context: HttpContext):
        if is_async:
            response = await endpoint(context.request)
        else:
            response = await run_in_threadpool(endpoint, context.request)
        return await from_asgi_app(response)(context)

    return pipe
