"""Static scraper — plain HTTP fetch with httpx, no JavaScript."""

from collections.abc import Mapping
from typing import Any

import httpx

from scraperoute.config import ScraperConfig
from scraperoute.errors import ScrapeError
from scraperoute.scrapers.base import Page, ScraperAction, target_url

_PASSTHROUGH = ("params", "data", "json", "content", "cookies")


class StaticScraper(ScraperAction):
    """Fetch pages with ``httpx.AsyncClient``.

    A client is created per fetch, so one scraper can serve concurrent
    routes without shared connection state. *transport* replaces the
    network layer (e.g. ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: ScraperConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport

    async def fetch(self, options: Mapping[str, Any]) -> Page:
        url = target_url(options)
        method = str(options.get("method", "GET")).upper()
        headers = {"User-Agent": self.config.user_agent, **self.config.headers}
        headers.update(options.get("headers") or {})
        extra = {key: options[key] for key in _PASSTHROUGH if key in options}

        async with httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=self.config.follow_redirects,
            timeout=options.get("timeout", self.config.timeout),
        ) as client:
            try:
                response = await client.request(method, url, headers=headers, **extra)
            except httpx.TimeoutException as exc:
                raise ScrapeError(url, detail="timeout") from exc
            except httpx.RequestError as exc:
                raise ScrapeError(url, detail=f"request error: {exc}") from exc

        return Page(
            url=str(response.url),
            status_code=response.status_code,
            text=response.text,
            headers=dict(response.headers),
        )
