"""Request body materialization: the one stage that waits on the client."""

import logging
from typing import Callable, Optional

from starlette.requests import ClientDisconnect, Request

from httpipe.exceptions import BodyReadError, BodyTooLargeError
from httpipe.http.context import HttpContext, HttpPipe
from httpipe.settings import Settings

logger = logging.getLogger(__name__)


def _declared_length(context: HttpContext) -> Optional[int]:
    value = context.request.headers.get("content-length")
    if value is None or not value.isdigit():
        return None
    return int(value)


async def _read_limited(request: Request, limit: int) -> bytes:
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise BodyTooLargeError(f"Request body exceeds the limit of {limit} bytes")
        chunks.append(chunk)
    buffer = b"".join(chunks)
    # Request.body() and BaseHTTPMiddleware's replay both read this cache.
    request._body = buffer
    return buffer


async def read_body(context: HttpContext, limit: Optional[int] = None) -> bytes:
    """
    Buffers the whole request body, once per exchange.

    Args:
        context: The current exchange.
        limit: Maximum body size in bytes, or None for no limit.

    Returns:
        The body bytes. Later calls return the cached buffer.

    Raises:
        BodyTooLargeError: If the declared or actual size exceeds `limit`.
        BodyReadError: If the client disconnected before the body was read.
    """
    if context.request_body is not None:
        return context.request_body

    declared = _declared_length(context)
    if limit is not None and declared is not None and declared > limit:
        raise BodyTooLargeError(f"Request body of {declared} bytes exceeds the limit of {limit} bytes")

    try:
        if limit is None:
            buffer = await context.request.body()
        else:
            buffer = await _read_limited(context.request, limit)
    except ClientDisconnect as e:
        logger.warning(f"[{context.exchange_id}] Client disconnected while reading the request body")
        raise BodyReadError("Client disconnected before the request body was read") from e

    context.request_body = buffer
    logger.debug(f"[{context.exchange_id}] Buffered request body ({len(buffer)} bytes)")
    return buffer


def body(handler: Callable[[bytes], HttpPipe], limit: Optional[int] = None) -> HttpPipe:
    """
    Reads the request body, then runs the pipe `handler` builds from it.

    Read failures propagate as exceptions; they never turn into NotMatched.

    Args:
        handler: Receives the buffered body and returns the pipe to run.
        limit: Maximum body size in bytes. Defaults to HTTPIPE_MAX_BODY_SIZE,
            read when this pipe is built.
    """
    max_size = limit if limit is not None else Settings().get_max_body_size()

    async def pipe(context: HttpContext):
        buffer = await read_body(context, max_size)
        return await handler(buffer)(context)

    return pipe
