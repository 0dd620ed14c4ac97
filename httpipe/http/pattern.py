"""Path template compilation.

Templates are slash-delimited; a segment beginning with `:name` captures one path
segment under that name, and any text after the name is a literal suffix
(`/files/:name.json`). Starlette's `{name}` and `{name:path}` placeholders are
accepted as well, since compilation is delegated to `starlette.routing.compile_path`.

Matching ignores case and tolerates one trailing slash.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from starlette.convertors import PathConvertor, StringConvertor
from starlette.routing import compile_path

from httpipe.exceptions import PatternCompileError

PLACEHOLDER_SIGIL = ":"

SIGIL_SEGMENT_REGEX = re.compile(r"^:([a-zA-Z_][a-zA-Z0-9_]*)(.*)$")


@dataclass(frozen=True)
class CompiledPattern:
    """A path template compiled to a regex plus its placeholder names in declaration order."""

    template: str
    regex: Pattern[str]
    names: Tuple[str, ...]

    def match(self, path: str) -> Optional[Tuple[str, ...]]:
        """Returns the captured groups when `path` matches the whole template, else None."""
        match = self.regex.match(path)
        if match is None:
            return None
        return match.groups()


def _to_starlette_segment(segment: str, template: str) -> str:
    if not segment.startswith(PLACEHOLDER_SIGIL):
        return segment
    sigil_match = SIGIL_SEGMENT_REGEX.match(segment)
    if sigil_match is None:
        raise PatternCompileError(f"Placeholder segment {segment!r} in {template!r} must start with a name")
    name, suffix = sigil_match.groups()
    return "{" + name + "}" + suffix


def _relax(regex: Pattern[str]) -> Pattern[str]:
    """Makes a trailing slash optional and the match case-insensitive."""
    body = regex.pattern
    if body.endswith("$"):
        body = body[:-1]
    if body != "^/":
        if body.endswith("/"):
            body = body[:-1]
        body += "/?"
    return re.compile(body + "$", re.IGNORECASE)


def compile_pattern(template: str) -> CompiledPattern:
    """
    Compiles a path template.

    Args:
        template: A path such as "/users/:id" or "/files/{rest:path}".

    Returns:
        The compiled pattern.

    Raises:
        PatternCompileError: If the template does not start with "/", has a
            `:` segment without a name, repeats a placeholder name, or uses a
            convertor other than `str` or `path`.
    """
    if not template.startswith("/"):
        raise PatternCompileError(f"Path template must start with '/': {template!r}")

    starlette_template = "/".join(_to_starlette_segment(segment, template) for segment in template.split("/"))

    try:
        regex, _, convertors = compile_path(starlette_template)
    except (ValueError, AssertionError) as e:
        raise PatternCompileError(f"Invalid path template {template!r}: {e}") from e

    # Other convertors either add capture groups of their own or convert values
    # away from strings, which would break positional zipping.
    unsupported = [
        name for name, convertor in convertors.items() if not isinstance(convertor, (StringConvertor, PathConvertor))
    ]
    if unsupported:
        raise PatternCompileError(
            f"Unsupported convertor for placeholder(s) {', '.join(unsupported)} in {template!r}; "
            "only 'str' and 'path' are allowed"
        )

    return CompiledPattern(template=template, regex=_relax(regex), names=tuple(convertors.keys()))
