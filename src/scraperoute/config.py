"""Router and scraper configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from scraperoute.errors import ConfigurationError


def _noop(*args: Any) -> None:
    return None


@dataclass(frozen=True, slots=True)
class ScraperConfig:
    """Settings shared by the built-in static and dynamic scrapers."""

    timeout: float = 30.0
    user_agent: str = "scraperoute/0.1"
    follow_redirects: bool = True
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    # Playwright
    browser: str = "chromium"
    headless: bool = True
    wait_until: str = "load"

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ConfigurationError(msg)
        if self.browser not in ("chromium", "firefox", "webkit"):
            msg = f"Unknown browser {self.browser!r}: use chromium, firefox or webkit"
            raise ConfigurationError(msg)
        if self.wait_until not in ("load", "domcontentloaded", "networkidle", "commit"):
            msg = f"Unknown wait_until {self.wait_until!r}"
            raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    Seeds the router's terminal callbacks and the fan-out bound::

        config = RouterConfig(otherwise=log_unrouted, max_concurrency=8)
        router = Router(config)

    ``static_factory`` / ``dynamic_factory`` build the actions returned by
    ``create_static()`` and ``create_dynamic()``. ``None`` means the
    built-in scrapers, configured with ``scraper``.
    """

    on_error: Callable[..., Any] = _noop
    otherwise: Callable[..., Any] = _noop

    # Upper bound on route entries evaluated at once per route() call
    max_concurrency: int = 64

    static_factory: Callable[[], Any] | None = None
    dynamic_factory: Callable[[], Any] | None = None

    scraper: ScraperConfig = field(default_factory=ScraperConfig)

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            msg = f"max_concurrency must be >= 1, got {self.max_concurrency}"
            raise ConfigurationError(msg)
