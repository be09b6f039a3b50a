"""ScraperAction base class and the Page it hands to pipeline steps.

An action is configured once with a pipeline, then started per URL::

    scraper = StaticScraper()
    scraper.scrape(lambda page, params: page.text).then(parse).done(store)

    scraper.set_chain_parameter({"url": "/users/7", "id": "7"})
    await scraper.get("https://example.com/users/7")

Steps run in registration order. ``scrape(fn)`` receives the fetched
``Page`` and the chain parameters; ``then(fn)`` receives the previous
step's value and the chain parameters. ``done`` callbacks receive the
final value; ``catch`` callbacks receive any exception raised on the way.
All steps may be ``def`` or ``async def``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine, Mapping
from dataclasses import dataclass, field
from typing import Any, Self

from scraperoute._internal.invoke import invoke
from scraperoute.config import ScraperConfig
from scraperoute.errors import ScrapeError, ScraperError

logger = logging.getLogger("scraperoute.scrapers")


@dataclass(frozen=True, slots=True)
class Page:
    """A fetched page."""

    url: str
    status_code: int
    text: str
    headers: Mapping[str, str] = field(default_factory=dict)


def target_url(options: Mapping[str, Any]) -> str:
    """Return the URL of a request options mapping (``uri`` or ``url``)."""
    url = options.get("uri") or options.get("url")
    if not url:
        msg = "Request options need a 'uri'"
        raise ScraperError(msg)
    return str(url)


class ScraperAction(ABC):
    """Base for route actions. Subclasses implement ``fetch()``."""

    def __init__(self, config: ScraperConfig | None = None) -> None:
        self.config = config or ScraperConfig()
        self.last_result: Any = None
        self._chain_params: dict[Any, Any] = {}
        self._steps: list[tuple[str, Callable[..., Any]]] = []
        self._catchers: list[Callable[..., Any]] = []
        self._done: list[Callable[..., Any]] = []
        self._status_handlers: dict[int, Callable[..., Any]] = {}

    # -- Pipeline -----------------------------------------------------------

    def scrape(self, fn: Callable[..., Any]) -> Self:
        self._steps.append(("scrape", fn))
        return self

    def then(self, fn: Callable[..., Any]) -> Self:
        self._steps.append(("then", fn))
        return self

    def catch(self, fn: Callable[..., Any]) -> Self:
        self._catchers.append(fn)
        return self

    def done(self, fn: Callable[..., Any]) -> Self:
        self._done.append(fn)
        return self

    def on_status_code(self, code: int, fn: Callable[..., Any]) -> Self:
        """Call ``fn(page, params)`` when a response has status *code*.

        A handled status never raises ``ScrapeError``, even for 4xx/5xx.
        """
        self._status_handlers[code] = fn
        return self

    # -- Router contract ----------------------------------------------------

    def set_chain_parameter(self, params: Mapping[Any, Any]) -> None:
        self._chain_params = dict(params)

    def get(self, url: str) -> Coroutine[Any, Any, Any]:
        """Start a plain GET scrape of *url*.

        Chain parameters are captured now, so a later
        ``set_chain_parameter`` does not leak into this run.
        """
        return self._run({"method": "GET", "uri": url}, dict(self._chain_params))

    def request(self, options: Mapping[str, Any]) -> Coroutine[Any, Any, Any]:
        """Start a scrape described by request *options*.

        Recognised keys: ``uri``, ``method``, ``headers``, ``params``,
        ``data``, ``json``, ``content``, ``cookies``, ``timeout``.
        """
        return self._run(dict(options), dict(self._chain_params))

    # -- Execution ----------------------------------------------------------

    @abstractmethod
    async def fetch(self, options: Mapping[str, Any]) -> Page:
        """Fetch the page described by *options*."""

    async def _run(self, options: dict[str, Any], params: dict[Any, Any]) -> Any:
        url = target_url(options)
        try:
            page = await self.fetch(options)
            handler = self._status_handlers.get(page.status_code)
            if handler is not None:
                await invoke(handler, page, params)
            elif page.status_code >= 400:
                raise ScrapeError(page.url, page.status_code, "unexpected status")

            value: Any = page
            for kind, fn in self._steps:
                if kind == "scrape":
                    value = await invoke(fn, page, params)
                else:
                    value = await invoke(fn, value, params)
        except Exception as exc:
            if not self._catchers:
                raise
            logger.debug("Scrape of %s failed: %r", url, exc)
            for fn in self._catchers:
                await invoke(fn, exc, params)
            return None

        self.last_result = value
        for fn in self._done:
            await invoke(fn, value)
        return value
