from httpipe.core.algebra import always, choose, compose, never
from httpipe.core.result import NOT_MATCHED, Matched, NotMatched, Pipe, Result, is_matched

__all__ = [
    "NOT_MATCHED",
    "Matched",
    "NotMatched",
    "Pipe",
    "Result",
    "always",
    "choose",
    "compose",
    "is_matched",
    "never",
]
