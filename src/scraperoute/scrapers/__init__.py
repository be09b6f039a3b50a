"""Scraper actions bound to routes.

Every action satisfies the contract the router consumes:

- ``set_chain_parameter(params)`` — matched route parameters
- ``get(url)`` / ``request(options)`` — start a scrape, return an awaitable

``StaticScraper`` fetches raw HTML with httpx. ``DynamicScraper`` renders
the page in a headless browser (``pip install scraperoute[dynamic]``).
"""

from scraperoute.scrapers.base import Page, ScraperAction
from scraperoute.scrapers.dynamic import DynamicScraper
from scraperoute.scrapers.static import StaticScraper

__all__ = ["DynamicScraper", "Page", "ScraperAction", "StaticScraper"]
