"""Request matchers.

Each matcher projects one facet of the request and hands it to a continuation
that returns the pipe to run next. Matchers that compare against a literal
return `never` on mismatch, so they compose like any other pipe.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
from urllib.parse import quote, unquote

from starlette.datastructures import URL, Headers
from starlette.requests import Request

from httpipe.core.algebra import never
from httpipe.http.context import HttpContext, HttpPipe
from httpipe.http.pattern import compile_pattern

logger = logging.getLogger(__name__)

Params = Dict[str, str]
QueryValue = Union[str, List[str]]
Query = Dict[str, QueryValue]


def to_multi_value_mapping(items: Iterable[Tuple[str, str]]) -> Query:
    """Folds (key, value) pairs into a mapping: single values as str, repeated keys as lists in order."""
    mapping: Query = {}
    for key, value in items:
        current = mapping.get(key)
        if current is None:
            mapping[key] = value
        elif isinstance(current, list):
            current.append(value)
        else:
            mapping[key] = [current, value]
    return mapping


def decode_captures(captures: Iterable[str]) -> List[str]:
    """Percent-decodes captured path segments."""
    return [unquote(capture) for capture in captures]


def raw_path(req: Request) -> str:
    """The request path as sent on the wire, still percent-encoded."""
    raw = req.scope.get("raw_path")
    if raw:
        return raw.decode("latin-1").split("?", 1)[0]
    return quote(req.scope["path"])


def request(handler: Callable[[Request], HttpPipe]) -> HttpPipe:
    async def pipe(context: HttpContext):
        return await handler(context.request)(context)

    return pipe


def parse_url(handler: Callable[[URL], HttpPipe]) -> HttpPipe:
    return request(lambda req: handler(req.url))


def parse_path(pattern: str, handler: Callable[[Params], HttpPipe]) -> HttpPipe:
    """
    Matches the request path against a template with named placeholders.

    The template is compiled once, here. Per request, the raw path must match the
    whole template; the captures are percent-decoded and zipped with the
    placeholder names. A capture count that differs from the number of names is
    treated as no match.

    Args:
        pattern: The path template, e.g. "/users/:id".
        handler: Receives the placeholder values and returns the pipe to run.

    Returns:
        A pipe that runs the handler's pipe on a match and declines otherwise.

    Raises:
        PatternCompileError: If the template is invalid.
    """
    compiled = compile_pattern(pattern)

    def on_request(req: Request) -> HttpPipe:
        captures = compiled.match(raw_path(req))
        if captures is None:
            return never

        values = decode_captures(captures)
        if len(values) != len(compiled.names):
            logger.debug(
                f"Pattern {compiled.template!r} captured {len(values)} values for {len(compiled.names)} names"
            )
            return never

        return handler(dict(zip(compiled.names, values)))

    return request(on_request)


def parse_query(handler: Callable[[Query], HttpPipe]) -> HttpPipe:
    return request(lambda req: handler(to_multi_value_mapping(req.query_params.multi_items())))


def if_path(url_path: str, handler: Callable[[], HttpPipe]) -> HttpPipe:
    """Runs `handler()` only when the decoded request path equals `url_path`."""
    return request(lambda req: handler() if req.scope["path"] == url_path else never)


def method(handler: Callable[[str], HttpPipe]) -> HttpPipe:
    return request(lambda req: handler(req.method))


def if_method(http_method: str, part: HttpPipe) -> HttpPipe:
    return method(lambda verb: part if verb == http_method else never)


def http_version(handler: Callable[[str], HttpPipe]) -> HttpPipe:
    return request(lambda req: handler(req.scope.get("http_version", "1.1")))


def if_http_version(version: str, part: HttpPipe) -> HttpPipe:
    return http_version(lambda v: part if v == version else never)


def headers(handler: Callable[[Headers], HttpPipe]) -> HttpPipe:
    return request(lambda req: handler(req.headers))


def header(name: str, handler: Callable[[Optional[str]], HttpPipe]) -> HttpPipe:
    """Hands the value of header `name` to `handler`; repeated headers are joined with ', '."""

    def on_headers(hs: Headers) -> HttpPipe:
        values = hs.getlist(name.lower())
        return handler(", ".join(values) if values else None)

    return headers(on_headers)


def GET(part: HttpPipe) -> HttpPipe:
    return if_method("GET", part)


def POST(part: HttpPipe) -> HttpPipe:
    return if_method("POST", part)


def HEAD(part: HttpPipe) -> HttpPipe:
    return if_method("HEAD", part)


def PUT(part: HttpPipe) -> HttpPipe:
    return if_method("PUT", part)


def DELETE(part: HttpPipe) -> HttpPipe:
    return if_method("DELETE", part)


def TRACE(part: HttpPipe) -> HttpPipe:
    return if_method("TRACE", part)


def OPTIONS(part: HttpPipe) -> HttpPipe:
    return if_method("OPTIONS", part)


def CONNECT(part: HttpPipe) -> HttpPipe:
    return if_method("CONNECT", part)


def PATCH(part: HttpPipe) -> HttpPipe:
    return if_method("PATCH", part)


def OTHER(name: str, part: HttpPipe) -> HttpPipe:
    return if_method(name, part)
