"""Router — route table builder and fan-out dispatcher.

Routes are declared with a chained builder during setup::

    router = Router()
    router.on("/users/:id").create_static().scrape(parse_user)
    router.on("/search").request({"method": "POST"}).create_dynamic()
    router.otherwise(log_unrouted)

and every routed URL is tested against *every* route (not first-match)::

    await router.route("https://example.com/users/7", on_done)

Binder calls (``get``, ``request``, ``attach``, ``create_static``,
``create_dynamic``) target the most recently declared route unless an
explicit ``RouteHandle`` from ``declare()`` is passed.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Self

import anyio
import anyio.abc

from scraperoute._internal.invoke import invoke
from scraperoute.config import RouterConfig
from scraperoute.errors import RouterMisuseError
from scraperoute.routing.matchers import declaration_for, resolve_matcher
from scraperoute.routing.route import RouteEntry, RouteHandle
from scraperoute.scrapers import DynamicScraper, StaticScraper

logger = logging.getLogger("scraperoute.router")


@dataclass(slots=True)
class _Outcome:
    """Single accumulation point for one route() call."""

    matched: bool = False
    error: Exception | None = None

    def fail(self, error: Exception) -> None:
        if self.error is None:
            self.error = error


class Router:
    """Ordered route table with concurrent dispatch.

    Usage::

        router = Router(RouterConfig(otherwise=print))
        router.on("/files/*").attach(my_action)
        async with router:
            await router.route("/files/a/b")

    Entering the router (``async with``) runs the awaitables returned by
    actions in a background task group, so ``route()`` returns once
    matching and dispatch *initiation* are done. Outside the context
    they are awaited inside the fan-out.
    """

    __slots__ = ("_background", "_config", "_entries", "_error_fn", "_otherwise_fn")

    def __init__(self, config: RouterConfig | None = None) -> None:
        self._config = config or RouterConfig()
        self._entries: list[RouteEntry] = []
        self._error_fn: Callable[..., Any] = self._config.on_error
        self._otherwise_fn: Callable[..., Any] = self._config.otherwise
        self._background: anyio.abc.TaskGroup | None = None

    @property
    def config(self) -> RouterConfig:
        return self._config

    @property
    def routes(self) -> tuple[RouteEntry, ...]:
        """Snapshot of the route table in declaration order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Router(routes={len(self._entries)})"

    # -- Builder ------------------------------------------------------------

    def on(self, declaration: object) -> Self:
        """Declare a route and bind it to a plain ``get``.

        *declaration* is a template string (``/users/:id``), a compiled
        regular expression, or a predicate ``(url) -> bool | Mapping``.
        Raises ``InvalidRouteError`` immediately for anything else.
        """
        self._append(declaration)
        return self.get()

    def declare(self, declaration: object) -> RouteHandle:
        """Declare a route and return an explicit handle to it."""
        entry = self._append(declaration)
        entry.bind_get()
        return RouteHandle(self, entry)

    def get(self, handle: RouteHandle | None = None) -> Self:
        """Dispatch matches of the target route with ``action.get(url)``."""
        self._target(handle, "get").bind_get()
        return self

    def request(self, options: Mapping[str, Any], handle: RouteHandle | None = None) -> Self:
        """Dispatch matches with ``action.request(options)``.

        The ``uri`` option is always replaced by the routed URL.
        """
        self._target(handle, "request").bind_request(options)
        return self

    def attach(self, action: Any, handle: RouteHandle | None = None) -> Self:
        """Attach an externally constructed action to the target route."""
        self._target(handle, "attach").attach(action)
        return self

    def create_static(self, handle: RouteHandle | None = None) -> StaticScraper:
        """Attach a new static scraper to the target route and return it."""
        factory = self._config.static_factory or (lambda: StaticScraper(self._config.scraper))
        return self._create(handle, "create_static", factory)

    def create_dynamic(self, handle: RouteHandle | None = None) -> DynamicScraper:
        """Attach a new dynamic scraper to the target route and return it."""
        factory = self._config.dynamic_factory or (lambda: DynamicScraper(self._config.scraper))
        return self._create(handle, "create_dynamic", factory)

    def on_error(self, callback: Callable[..., Any]) -> Self:
        """Set the error callback, ``callback(error, url)``. Last call wins."""
        self._error_fn = callback
        return self

    def otherwise(self, callback: Callable[..., Any]) -> Self:
        """Set the no-match callback, ``callback(url)``. Last call wins."""
        self._otherwise_fn = callback
        return self

    def _append(self, declaration: object) -> RouteEntry:
        tagged = declaration_for(declaration)
        entry = RouteEntry(declaration=tagged, matcher=resolve_matcher(tagged))
        self._entries.append(entry)
        logger.debug("Declared route %s", entry.describe())
        return entry

    def _target(self, handle: RouteHandle | None, operation: str) -> RouteEntry:
        if handle is not None:
            if handle.router is not self:
                msg = f"{operation}() was given a handle that belongs to another router"
                raise RouterMisuseError(msg)
            return handle.entry
        if not self._entries:
            msg = f"{operation}() called before any route was declared; call on() first"
            raise RouterMisuseError(msg)
        return self._entries[-1]

    def _create(self, handle: RouteHandle | None, operation: str, factory: Callable[[], Any]) -> Any:
        entry = self._target(handle, operation)
        if entry.action is not None:
            msg = f"{operation}(): route {entry.describe()} already has an action attached"
            raise RouterMisuseError(msg)
        action = factory()
        entry.attach(action)
        return action

    # -- Dispatch -----------------------------------------------------------

    async def route(self, url: str, callback: Callable[[bool], Any] | None = None) -> Self:
        """Route *url* through every matching route.

        Each route's matcher is evaluated concurrently. Matched routes get
        their parameters injected into the action before dispatch. Then
        exactly one of these happens:

        - an evaluation raised: ``on_error(error, url)`` with the first error
        - nothing matched: ``otherwise(url)``
        - otherwise: neither

        ``callback(matched)`` is always called last, exactly once.

        Awaitables returned by actions run in the background while the
        router is entered (``async with router``), so completion means the
        scrapes were started. Outside the context they are awaited here,
        and completion fires only after every matched scrape has finished.
        """
        outcome = _Outcome()
        limiter = anyio.CapacityLimiter(self._config.max_concurrency)

        async def evaluate(entry: RouteEntry) -> None:
            async with limiter:
                try:
                    await self._evaluate(entry, url, outcome)
                except Exception as exc:
                    logger.debug("Route %s failed for %s: %r", entry.describe(), url, exc)
                    outcome.fail(exc)

        async with anyio.create_task_group() as tg:
            for entry in tuple(self._entries):
                tg.start_soon(evaluate, entry)

        try:
            if outcome.error is not None:
                await invoke(self._error_fn, outcome.error, url)
            elif not outcome.matched:
                logger.debug("No route matched %s", url)
                await invoke(self._otherwise_fn, url)
        finally:
            if callback is not None:
                await invoke(callback, outcome.matched)
        return self

    async def _evaluate(self, entry: RouteEntry, url: str, outcome: _Outcome) -> None:
        params = entry.matcher(url)
        if params is None:
            return
        outcome.matched = True
        pending = entry.fire(url, params)
        if not inspect.isawaitable(pending):
            return
        if self._background is not None:
            self._background.start_soon(self._supervise, pending, url)
        else:
            await pending

    async def _supervise(self, pending: Any, url: str) -> None:
        try:
            await pending
        except Exception as exc:
            logger.exception("Scrape dispatched for %s failed", url)
            try:
                await invoke(self._error_fn, exc, url)
            except Exception:
                logger.exception("Error callback failed for %s", url)

    # -- Background scope ---------------------------------------------------

    async def __aenter__(self) -> Self:
        if self._background is not None:
            msg = "Router is already entered"
            raise RouterMisuseError(msg)
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._background = task_group
        return self

    async def __aexit__(self, *exc_info: Any) -> bool | None:
        task_group = self._background
        if task_group is None:
            msg = "Router was not entered"
            raise RouterMisuseError(msg)
        try:
            return await task_group.__aexit__(*exc_info)
        finally:
            self._background = None
