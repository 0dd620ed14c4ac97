# Defines the HttpContext threaded through every HTTP pipe.

import http
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field
from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.types import Receive, Scope

from httpipe.core.result import Pipe
from httpipe.exceptions import HeadersSentError

HeaderValue = Union[str, Sequence[str]]


class HttpStatus(BaseModel):
    """A response status line."""

    code: int = Field()
    reason: Optional[str] = Field(default=None)


def default_reason(code: int) -> Optional[str]:
    """Returns the standard reason phrase for `code`, or None for unregistered codes."""
    try:
        return http.HTTPStatus(code).phrase
    except ValueError:
        return None


def _as_values(value: HeaderValue) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class ResponseSink:
    """The mutable response half of an exchange.

    Headers are stored in a case-insensitive, multi-valued collection. The status
    line is written once; after that, status and headers are frozen and only the
    body may grow. Nothing reaches the network until a host adapter builds the
    final response from this sink.
    """

    def __init__(self) -> None:
        self.status_code: int = 200
        self.reason: Optional[str] = None
        self.headers = MutableHeaders()
        self.body = bytearray()
        self.headers_sent = False

    @property
    def status(self) -> HttpStatus:
        return HttpStatus(code=self.status_code, reason=self.reason)

    def write_head(self, code: int, reason: Optional[str] = None) -> None:
        """Writes the status line.

        Args:
            code: The status code.
            reason: The reason phrase; the standard phrase for `code` when omitted.

        Raises:
            HeadersSentError: If the status line was already written.
        """
        if self.headers_sent:
            raise HeadersSentError(f"Cannot write status {code}: status line already written ({self.status_code})")
        self.status_code = code
        self.reason = reason if reason is not None else default_reason(code)
        self.headers_sent = True

    def _check_mutable(self, name: str) -> None:
        if self.headers_sent:
            raise HeadersSentError(f"Cannot modify header '{name}' after the status line was written")

    def get_header(self, name: str) -> Optional[Union[str, List[str]]]:
        values = self.headers.getlist(name)
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return values

    def set_header(self, name: str, value: HeaderValue) -> None:
        """Replaces all values of header `name`."""
        self._check_mutable(name)
        if name in self.headers:
            del self.headers[name]
        for v in _as_values(value):
            self.headers.append(name, v)

    def add_header(self, name: str, value: HeaderValue) -> None:
        """Appends to header `name`, keeping existing values first; sets it if absent."""
        self._check_mutable(name)
        if self.get_header(name) is None:
            self.set_header(name, value)
            return
        for v in _as_values(value):
            self.headers.append(name, v)

    def remove_header(self, name: str) -> None:
        self._check_mutable(name)
        if name in self.headers:
            del self.headers[name]

    def write(self, data: Union[str, bytes], encoding: Optional[str] = None) -> None:
        """Appends to the body, writing the status line first if needed."""
        if not self.headers_sent:
            self.write_head(self.status_code, self.reason)
        if isinstance(data, str):
            data = data.encode(encoding or "utf-8")
        self.body.extend(data)


@dataclass
class HttpContext:
    """Holds the state for a single exchange through the pipeline.

    Attributes:
        request: The incoming request.
        response: The response being built.
        exchange_id: A unique identifier for the exchange, used in log lines.
        request_body: The buffered request body, once a body stage has read it.
    """

    request: Request
    response: ResponseSink = field(default_factory=ResponseSink)
    exchange_id: uuid.UUID = field(default_factory=uuid.uuid4)
    request_body: Optional[bytes] = None


HttpPipe = Pipe[HttpContext]


def create_http_context(scope: Scope, receive: Receive) -> HttpContext:
    """Creates a fresh context for one HTTP exchange."""
    return HttpContext(request=Request(scope, receive))
