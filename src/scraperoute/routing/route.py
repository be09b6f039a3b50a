"""RouteEntry and RouteHandle."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from scraperoute.errors import MissingActionError, RouterMisuseError
from scraperoute.routing.matchers import (
    CompiledPattern,
    Declaration,
    Matcher,
    Params,
    Predicate,
    Template,
)

if TYPE_CHECKING:
    from scraperoute.routing.router import Router
    from scraperoute.scrapers import DynamicScraper, StaticScraper


@dataclass(slots=True, eq=False)
class RouteEntry:
    """One registered route: matcher, bound action, and dispatch method.

    ``action`` is attached at most once. ``dispatch`` is bound to a plain
    ``get`` when the entry is declared and can be rebound to ``request``.
    """

    declaration: Declaration
    matcher: Matcher
    action: Any = None
    dispatch: Callable[[str], Any] | None = None

    def attach(self, action: Any) -> None:
        if self.action is not None:
            msg = f"Route {self.describe()} already has an action attached"
            raise RouterMisuseError(msg)
        self.action = action

    def bind_get(self) -> None:
        def dispatch_get(url: str) -> Any:
            return self._action_for(url).get(url)

        self.dispatch = dispatch_get

    def bind_request(self, options: Mapping[str, Any]) -> None:
        options = dict(options)

        def dispatch_request(url: str) -> Any:
            return self._action_for(url).request({**options, "uri": url})

        self.dispatch = dispatch_request

    def fire(self, url: str, params: Params) -> Any:
        """Inject *params* into the action and start its dispatch."""
        self._action_for(url).set_chain_parameter(params)
        if self.dispatch is None:
            self.bind_get()
        return self.dispatch(url)

    def describe(self) -> str:
        match self.declaration:
            case Template(template):
                return repr(template)
            case CompiledPattern(pattern):
                return repr(pattern.pattern)
            case Predicate(func):
                return getattr(func, "__name__", repr(func))

    def _action_for(self, url: str) -> Any:
        if self.action is None:
            raise MissingActionError(url)
        return self.action


class RouteHandle:
    """Explicit handle to one declared route.

    Returned by ``Router.declare()``. Binder calls target this route only,
    regardless of routes declared afterwards::

        users = router.declare("/users/:id")
        posts = router.declare("/posts/:slug")
        users.create_static().scrape(parse_user)
        posts.request({"method": "POST"}).attach(post_scraper)
    """

    __slots__ = ("entry", "router")

    def __init__(self, router: Router, entry: RouteEntry) -> None:
        self.router = router
        self.entry = entry

    def get(self) -> RouteHandle:
        self.router.get(handle=self)
        return self

    def request(self, options: Mapping[str, Any]) -> RouteHandle:
        self.router.request(options, handle=self)
        return self

    def attach(self, action: Any) -> RouteHandle:
        self.router.attach(action, handle=self)
        return self

    def create_static(self) -> StaticScraper:
        return self.router.create_static(handle=self)

    def create_dynamic(self) -> DynamicScraper:
        return self.router.create_dynamic(handle=self)

    def __repr__(self) -> str:
        return f"RouteHandle({self.entry.describe()})"
