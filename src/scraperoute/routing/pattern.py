"""Path template compiler.

Turns a route template such as ``/users/:id`` into an anchored,
case-insensitive regular expression plus the ordered list of parameter
names it captures.

Token syntax::

    /users/:id          named segment, one or more non-"/" characters
    /users/:id(\\d+)    named segment with a custom sub-pattern
    /opt/:name?         optional segment; the leading "/" is optional too
    /file.:ext          the "." belongs to the parameter group
    /files/*            unnamed wildcard, captures the rest (including "/")
    /a(/b)?             "/(" opens a non-capturing group

Every template also accepts an optional trailing slash.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from scraperoute.errors import InvalidRouteError

_TOKEN = re.compile(r"(/)?(\.)?:(\w+)(?:(\(.*?\)))?(\?)?|\*")

# Default capture for a named segment: lazy, stops at "/"
SEGMENT_PATTERN = r"([^/]+?)"
WILDCARD_PATTERN = r"(.*)"


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """A compiled route template.

    ``keys`` holds one entry per capture in left-to-right order: the
    parameter name, or ``None`` for a ``*`` wildcard.
    """

    template: str
    pattern: re.Pattern[str]
    keys: tuple[str | None, ...]


def _escape_literal(text: str) -> str:
    return text.replace(".", r"\.")


def _render_token(match: re.Match[str], keys: list[str | None]) -> str:
    if match.group(0) == "*":
        keys.append(None)
        return WILDCARD_PATTERN

    slash, dot, name, capture, optional = match.groups()
    keys.append(name)
    slash = slash or ""
    prefix = r"\." if dot else ""
    capture = capture or SEGMENT_PATTERN
    if optional:
        # Slash moves inside the optional group so the whole segment can vanish
        return f"(?:{slash}{prefix}{capture})?"
    return f"{slash}(?:{prefix}{capture})"


@lru_cache(maxsize=512)
def compile_template(template: str) -> CompiledTemplate:
    """Compile a route template into a matching expression.

    Examples::

        compile_template("/users/:id").keys        -> ("id",)
        compile_template("/files/*").keys          -> (None,)
        compile_template("/opt/:name?").pattern    -> ^/opt(?:/([^/]+?))?/?\\Z

    Raises ``InvalidRouteError`` if the generated expression does not
    compile (e.g. an unbalanced custom sub-pattern).
    """
    source = (template + "/?").replace("/(", "(?:/")
    keys: list[str | None] = []
    parts: list[str] = []
    pos = 0
    for match in _TOKEN.finditer(source):
        parts.append(_escape_literal(source[pos : match.start()]))
        parts.append(_render_token(match, keys))
        pos = match.end()
    parts.append(_escape_literal(source[pos:]))

    expression = "^" + "".join(parts) + r"\Z"
    try:
        pattern = re.compile(expression, re.IGNORECASE)
    except re.error as exc:
        msg = f"Route template {template!r} does not compile: {exc}"
        raise InvalidRouteError(msg) from exc
    return CompiledTemplate(template=template, pattern=pattern, keys=tuple(keys))
