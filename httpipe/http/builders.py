"""Response builders: status line, headers and body mutations."""

from typing import Callable, Optional, Union

from httpipe.core.algebra import always, compose
from httpipe.http.context import HeaderValue, HttpContext, HttpPipe, HttpStatus, ResponseSink

Body = Union[str, bytes]


def response(handler: Callable[[ResponseSink], HttpPipe]) -> HttpPipe:
    async def pipe(context: HttpContext):
        return await handler(context.response)(context)

    return pipe


def status_code(handler: Callable[[int], HttpPipe]) -> HttpPipe:
    return response(lambda res: handler(res.status_code))


def status_message(handler: Callable[[Optional[str]], HttpPipe]) -> HttpPipe:
    return response(lambda res: handler(res.reason))


def status(handler: Callable[[HttpStatus], HttpPipe]) -> HttpPipe:
    return response(lambda res: handler(res.status))


def set_header(key: str, value: HeaderValue) -> HttpPipe:
    """Replaces the values of header `key`."""

    def on_response(res: ResponseSink) -> HttpPipe:
        res.set_header(key, value)
        return always

    return response(on_response)


def add_header(key: str, value: HeaderValue) -> HttpPipe:
    """Appends to header `key` after its current values, or sets it if absent."""

    def on_response(res: ResponseSink) -> HttpPipe:
        res.add_header(key, value)
        return always

    return response(on_response)


def set_status(status_or_code: Union[HttpStatus, int], reason: Optional[str] = None) -> HttpPipe:
    """
    Writes the status line.

    Args:
        status_or_code: A status code, or an HttpStatus whose own reason takes
            precedence over `reason`.
        reason: The reason phrase; the standard phrase when omitted.

    Raises:
        HeadersSentError: When run after the status line was already written.
    """

    def on_response(res: ResponseSink) -> HttpPipe:
        if isinstance(status_or_code, HttpStatus):
            res.write_head(status_or_code.code, status_or_code.reason or reason)
        else:
            res.write_head(status_or_code, reason)
        return always

    return response(on_response)


def write_body(body: Body, encoding: Optional[str] = None) -> HttpPipe:
    def on_response(res: ResponseSink) -> HttpPipe:
        res.write(body, encoding)
        return always

    return response(on_response)


def respond(code: int, body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return compose(set_status(code), write_body(body, encoding) if body is not None else always)
