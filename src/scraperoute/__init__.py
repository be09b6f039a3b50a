"""scraperoute — route URLs to scraping actions.

Declare routes with path templates, regular expressions, or predicates,
bind a scraper to each, and route URLs through all of them at once::

    from scraperoute import Router

    router = Router()
    router.on("/users/:id").create_static().scrape(parse_user)
    router.otherwise(lambda url: print("unrouted", url))

    async with router:
        await router.route("/users/7")

Dynamic (browser-rendered) scraping needs ``pip install scraperoute[dynamic]``.
"""

__version__ = "0.1.0"
__all__ = [
    "CompiledPattern",
    "ConfigurationError",
    "DynamicScraper",
    "InvalidRouteError",
    "MissingActionError",
    "Page",
    "Predicate",
    "RouteHandle",
    "Router",
    "RouterConfig",
    "RouterMisuseError",
    "ScrapeError",
    "ScraperAction",
    "ScraperConfig",
    "ScraperError",
    "ScraperNotInstalledError",
    "StaticScraper",
    "Template",
    "compile_template",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import scraperoute`` fast; httpx is only imported once a
    scraper or the router is actually used.
    """
    if name == "Router":
        from scraperoute.routing.router import Router

        return Router

    if name == "RouteHandle":
        from scraperoute.routing.route import RouteHandle

        return RouteHandle

    if name in ("CompiledPattern", "Predicate", "Template"):
        from scraperoute.routing import matchers as _matchers

        return getattr(_matchers, name)

    if name == "compile_template":
        from scraperoute.routing.pattern import compile_template

        return compile_template

    if name in ("RouterConfig", "ScraperConfig"):
        from scraperoute import config as _config

        return getattr(_config, name)

    if name in ("DynamicScraper", "Page", "ScraperAction", "StaticScraper"):
        from scraperoute import scrapers as _scrapers

        return getattr(_scrapers, name)

    if name in (
        "ConfigurationError",
        "InvalidRouteError",
        "MissingActionError",
        "RouterMisuseError",
        "ScrapeError",
        "ScraperError",
        "ScraperNotInstalledError",
    ):
        from scraperoute import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
