from httpipe.http.builders import (
    add_header,
    respond,
    response,
    set_header,
    set_status,
    status,
    status_code,
    status_message,
    write_body,
)
from httpipe.http.canned import *  # noqa: F401,F403
from httpipe.http.canned import STATUS_CONSTRUCTORS
from httpipe.http.context import HeaderValue, HttpContext, HttpPipe, HttpStatus, ResponseSink, create_http_context
from httpipe.http.materialize import body, read_body
from httpipe.http.matchers import (
    CONNECT,
    DELETE,
    GET,
    HEAD,
    OPTIONS,
    OTHER,
    PATCH,
    POST,
    PUT,
    TRACE,
    Params,
    Query,
    header,
    headers,
    http_version,
    if_http_version,
    if_method,
    if_path,
    method,
    parse_path,
    parse_query,
    parse_url,
    request,
)
from httpipe.http.pattern import CompiledPattern, compile_pattern

__all__ = [
    "CONNECT",
    "DELETE",
    "GET",
    "HEAD",
    "OPTIONS",
    "OTHER",
    "PATCH",
    "POST",
    "PUT",
    "TRACE",
    "STATUS_CONSTRUCTORS",
    "CompiledPattern",
    "HeaderValue",
    "HttpContext",
    "HttpPipe",
    "HttpStatus",
    "Params",
    "Query",
    "ResponseSink",
    "add_header",
    "body",
    "compile_pattern",
    "create_http_context",
    "header",
    "headers",
    "http_version",
    "if_http_version",
    "if_method",
    "if_path",
    "method",
    "parse_path",
    "parse_query",
    "parse_url",
    "read_body",
    "request",
    "respond",
    "response",
    "set_header",
    "set_status",
    "status",
    "status_code",
    "status_message",
    "write_body",
    *STATUS_CONSTRUCTORS.values(),
]
