"""scraperoute exception hierarchy.

Shared across the router, matchers, and scrapers so every module raises
and catches the same types.
"""


class ScraperError(Exception):
    """Base for all scraperoute-specific errors."""


class ConfigurationError(ScraperError):
    """Raised when a configuration value is invalid."""


class InvalidRouteError(ConfigurationError, TypeError):
    """Raised when a route declaration cannot be turned into a matcher.

    Either the declaration is not a template string, compiled pattern,
    or callable, or the template does not compile to a valid expression.
    Raised at registration time, never at dispatch time.
    """


class RouterMisuseError(ScraperError):
    """Raised when the route builder is called out of order.

    Binding an action or a dispatch method before any route exists, or
    attaching a second action to the same route. Raised synchronously
    from the offending call and never routed through ``on_error``.
    """


class MissingActionError(ScraperError):
    """A route matched but no action was ever attached to it."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Route matched {url!r} but has no action attached")


class ScrapeError(ScraperError):
    """Raised by a scraper action when fetching a page fails."""

    def __init__(self, url: str, status: int | None = None, detail: str = "") -> None:
        self.url = url
        self.status = status
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.url]
        if self.status is not None:
            parts.append(str(self.status))
        if self.detail:
            parts.append(self.detail)
        return ": ".join(parts)


class ScraperNotInstalledError(ScraperError):
    """Raised when an optional scraping backend is not installed."""
