"""Route declarations and the matcher adapter.

A route can be declared three ways: a template string, a compiled
regular expression, or a predicate function. Each declaration is tagged
once at registration and resolved into the same matcher shape::

    matcher(url) -> Params | None

``None`` means "no match". A match is a ``dict`` of parameters; for
templates and patterns the first key is always ``"url"`` (the whole
matched string).
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from scraperoute.errors import InvalidRouteError
from scraperoute.routing.pattern import compile_template

# Parameter key: a template name, or the positional index of a wildcard
ParamKey: TypeAlias = str | int
Params: TypeAlias = dict[ParamKey, Any]
Matcher: TypeAlias = Callable[[str], Params | None]


@dataclass(frozen=True, slots=True)
class Template:
    """A path template such as ``/users/:id``."""

    template: str


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A pre-built regular expression, applied with ``search``."""

    pattern: re.Pattern[str]


@dataclass(frozen=True, slots=True)
class Predicate:
    """A function deciding whether a URL matches.

    A ``Mapping`` result is used as the parameters; any other truthy
    result matches with no parameters; a falsy result does not match.
    """

    func: Callable[[str], Any]


Declaration: TypeAlias = Template | CompiledPattern | Predicate


def declaration_for(value: object) -> Declaration:
    """Tag a raw route declaration.

    Raises ``InvalidRouteError`` for anything that is not a string,
    compiled pattern, callable, or already-tagged declaration.
    """
    match value:
        case Template(str()) | CompiledPattern(re.Pattern()):
            return value
        case Predicate(func) if callable(func):
            return value
        case Template() | CompiledPattern() | Predicate():
            msg = f"{type(value).__name__} holds an invalid value: {value!r}"
            raise InvalidRouteError(msg)
        case str():
            return Template(value)
        case re.Pattern():
            return CompiledPattern(value)
        case _ if callable(value):
            return Predicate(value)
    msg = (
        "A route must be a template string, a compiled regular expression, "
        f"or a callable, got {type(value).__name__}"
    )
    raise InvalidRouteError(msg)


def _template_matcher(template: str) -> Matcher:
    compiled = compile_template(template)
    keys: list[ParamKey] = ["url"]
    for index, key in enumerate(compiled.keys, start=1):
        keys.append(index if key is None else key)
    pattern = compiled.pattern

    def match_template(url: str) -> Params | None:
        found = pattern.match(url)
        if found is None:
            return None
        return dict(zip(keys, (found.group(0), *found.groups()), strict=False))

    return match_template


def _pattern_matcher(pattern: re.Pattern[str]) -> Matcher:
    def match_pattern(url: str) -> Params | None:
        found = pattern.search(url)
        if found is None:
            return None
        params: Params = {"url": found.group(0)}
        params.update(found.groupdict())
        return params

    return match_pattern


def _predicate_matcher(func: Callable[[str], Any]) -> Matcher:
    def match_predicate(url: str) -> Params | None:
        result = func(url)
        if isinstance(result, Mapping):
            return dict(result)
        if result:
            return {}
        return None

    return match_predicate


def resolve_matcher(declaration: object) -> Matcher:
    """Resolve a raw or tagged declaration into a matcher function.

    Template compilation happens here, so an invalid template fails at
    registration rather than on the first routed URL.
    """
    match declaration_for(declaration):
        case Template(template):
            return _template_matcher(template)
        case CompiledPattern(pattern):
            return _pattern_matcher(pattern)
        case Predicate(func):
            return _predicate_matcher(func)
