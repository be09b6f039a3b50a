"""Dynamic scraper — renders pages in a headless browser via Playwright.

Playwright is optional: ``pip install scraperoute[dynamic]`` and then
``playwright install chromium``.
"""

from collections.abc import Mapping
from typing import Any

from scraperoute.errors import ScrapeError, ScraperError, ScraperNotInstalledError
from scraperoute.scrapers.base import Page, ScraperAction, target_url


def _get_async_playwright() -> Any:
    """Import Playwright's async entry point or raise a clear error."""
    try:
        from playwright.async_api import async_playwright

        return async_playwright
    except ImportError:
        msg = (
            "DynamicScraper requires 'playwright'. "
            "Install it with: pip install scraperoute[dynamic]"
        )
        raise ScraperNotInstalledError(msg) from None


class DynamicScraper(ScraperAction):
    """Scrape the rendered DOM of a page.

    Only navigations (``GET``) are supported; ``Page.text`` is the DOM
    serialized after the ``wait_until`` event from ``ScraperConfig``.
    """

    async def fetch(self, options: Mapping[str, Any]) -> Page:
        url = target_url(options)
        method = str(options.get("method", "GET")).upper()
        if method != "GET":
            msg = f"DynamicScraper cannot send {method} requests, only GET navigations"
            raise ScraperError(msg)

        async_playwright = _get_async_playwright()
        headers = {**self.config.headers, **(options.get("headers") or {})}
        timeout_ms = float(options.get("timeout", self.config.timeout)) * 1000

        async with async_playwright() as playwright:
            browser_type = getattr(playwright, self.config.browser)
            browser = await browser_type.launch(headless=self.config.headless)
            try:
                context = await browser.new_context(
                    user_agent=self.config.user_agent,
                    extra_http_headers=headers,
                )
                tab = await context.new_page()
                try:
                    response = await tab.goto(
                        url, wait_until=self.config.wait_until, timeout=timeout_ms,
                    )
                except Exception as exc:
                    raise ScrapeError(url, detail=f"navigation failed: {exc}") from exc
                text = await tab.content()
                return Page(
                    url=tab.url,
                    status_code=response.status if response is not None else 200,
                    text=text,
                    headers=await response.all_headers() if response is not None else {},
                )
            finally:
                await browser.close()
