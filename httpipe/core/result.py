"""Result model shared by every pipe.

A pipe either matches, carrying the (possibly mutated) context forward, or
declines the exchange. Declining is not an error: failures are raised.
"""

from dataclasses import dataclass
from typing import Awaitable, Generic, Protocol, TypeVar, Union

C = TypeVar("C")


@dataclass(frozen=True)
class Matched(Generic[C]):
    """The pipe handled the exchange; `context` is passed to the next stage."""

    context: C


@dataclass(frozen=True)
class NotMatched:
    """The pipe declines the exchange."""


Result = Union[Matched[C], NotMatched]

NOT_MATCHED = NotMatched()


class Pipe(Protocol[C]):
    """An asynchronous function from a context to a Result."""

    def __call__(self, context: C) -> Awaitable[Result[C]]: ...


def is_matched(result: object) -> bool:
    """Returns True for a Matched result, False for NotMatched.

    Raises:
        TypeError: If `result` is neither variant.
    """
    if isinstance(result, Matched):
        return True
    if isinstance(result, NotMatched):
        return False
    raise TypeError(f"Expected Matched or NotMatched, got {type(result).__name__}")
