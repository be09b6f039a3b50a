"""Invoke helpers — call sync or async callbacks uniformly.

Terminal callbacks (``on_error``, ``otherwise``, the completion callback)
and scraper pipeline steps can be ``def`` or ``async def``. This module
keeps the sync/async check in one place::

    from scraperoute._internal.invoke import invoke

    result = await invoke(callback, *args)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
