"""Canned responses for the common HTTP status codes.

Constructors are named after the status they write and return pipes, so they
compose with matchers directly: `GET(if_path("/", lambda: Ok("hi")))`.
"""

from typing import Dict, Optional, Sequence, Union

from httpipe.core.algebra import compose
from httpipe.http.builders import Body, respond, set_header, set_status
from httpipe.http.context import HttpPipe

STATUS_CONSTRUCTORS: Dict[int, str] = {
    100: "Continue",
    101: "SwitchingProtocols",
    200: "Ok",
    201: "Created",
    202: "Accepted",
    204: "NoContent",
    301: "MovedPermanently",
    302: "Found",
    304: "NotModified",
    400: "BadRequest",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    405: "MethodNotAllowed",
    406: "NotAcceptable",
    408: "RequestTimeout",
    409: "Conflict",
    410: "Gone",
    415: "UnsupportedMediaType",
    422: "UnprocessableEntity",
    428: "PreconditionRequired",
    429: "TooManyRequests",
    500: "InternalServerError",
    501: "NotImplemented",
    502: "BadGateway",
    503: "ServiceUnavailable",
    504: "GatewayTimeout",
    505: "InvalidHttpVersion",
}


def Continue(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(100, body, encoding)


def SwitchingProtocols(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(101, body, encoding)


def Ok(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(200, body, encoding)


def Created(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(201, body, encoding)


def Accepted(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(202, body, encoding)


def NoContent(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(204, body, encoding)


def MovedPermanently(location: str) -> HttpPipe:
    return compose(set_header("Location", location), set_status(301))


def Found(location: str) -> HttpPipe:
    return compose(set_header("Location", location), set_status(302))


def NotModified(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(304, body, encoding)


def BadRequest(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(400, body, encoding)


def Unauthorized(
    challenge: Union[str, Sequence[str]], body: Optional[Body] = None, encoding: Optional[str] = None
) -> HttpPipe:
    """Sets WWW-Authenticate to `challenge`, then responds 401."""
    return compose(set_header("WWW-Authenticate", challenge), respond(401, body, encoding))


def Forbidden(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(403, body, encoding)


def NotFound(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(404, body, encoding)


def MethodNotAllowed(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(405, body, encoding)


def NotAcceptable(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(406, body, encoding)


def RequestTimeout(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(408, body, encoding)


def Conflict(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(409, body, encoding)


def Gone(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(410, body, encoding)


def UnsupportedMediaType(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(415, body, encoding)


def UnprocessableEntity(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(422, body, encoding)


def PreconditionRequired(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(428, body, encoding)


def TooManyRequests(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(429, body, encoding)


def InternalServerError(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(500, body, encoding)


def NotImplemented(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:  # noqa: A001
    return respond(501, body, encoding)


def BadGateway(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(502, body, encoding)


def ServiceUnavailable(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(503, body, encoding)


def GatewayTimeout(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(504, body, encoding)


def InvalidHttpVersion(body: Optional[Body] = None, encoding: Optional[str] = None) -> HttpPipe:
    return respond(505, body, encoding)


__all__ = ["STATUS_CONSTRUCTORS", *STATUS_CONSTRUCTORS.values()]
