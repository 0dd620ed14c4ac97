# Composition primitives: always, never, compose, choose.

import logging
from typing import Iterable, TypeVar

from httpipe.core.result import NOT_MATCHED, Matched, Pipe, Result, is_matched

logger = logging.getLogger(__name__)

C = TypeVar("C")


async def always(context: C) -> Result[C]:
    """Matches without side effects. Identity for `compose`."""
    return Matched(context)


async def never(context: C) -> Result[C]:
    """Declines every exchange. Identity for `choose`."""
    return NOT_MATCHED


def compose(*pipes: Pipe[C]) -> Pipe[C]:
    """
    Sequences pipes left to right.

    Each stage receives the context matched by the previous one. The first stage
    that yields NotMatched ends the sequence; later stages are never invoked, so
    none of their side effects happen. Exceptions propagate unchanged.

    Args:
        *pipes: The stages, in execution order.

    Returns:
        A pipe yielding the last stage's result, or NotMatched.
    """
    if not pipes:
        return always
    if len(pipes) == 1:
        return pipes[0]

    stages = tuple(pipes)

    async def composed(context: C) -> Result[C]:
        result: Result[C] = Matched(context)
        for i, stage in enumerate(stages):
            result = await stage(context)
            if not is_matched(result):
                logger.debug(f"compose: stage {i + 1}/{len(stages)} declined")
                return result
            context = result.context
        return result

    return composed


def choose(pipes: Iterable[Pipe[C]]) -> Pipe[C]:
    """
    Tries alternatives in order and yields the first match.

    An alternative only runs after every earlier one yielded NotMatched, so with
    overlapping routes the first listed wins.

    Args:
        pipes: The alternatives, in trial order.

    Returns:
        A pipe yielding the first Matched result, or NotMatched if all decline.
    """
    alternatives = tuple(pipes)
    if not alternatives:
        return never

    async def chosen(context: C) -> Result[C]:
        for alternative in alternatives:
            result = await alternative(context)
            if is_matched(result):
                return result
        logger.debug(f"choose: none of {len(alternatives)} alternatives matched")
        return NOT_MATCHED

    return chosen
