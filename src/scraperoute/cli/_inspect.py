"""``scraperoute compile`` and ``scraperoute match``.

Both commands exit with status 1 when the template does not compile;
``match`` also exits 1 when none of the URLs match.
"""

import argparse
import json
import sys

from scraperoute.errors import InvalidRouteError
from scraperoute.routing.matchers import resolve_matcher
from scraperoute.routing.pattern import compile_template


def run_compile(args: argparse.Namespace) -> None:
    """Print the compiled expression and parameter keys of a template."""
    try:
        compiled = compile_template(args.template)
    except InvalidRouteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    keys = ["*" if key is None else key for key in compiled.keys]
    print(f"pattern: {compiled.pattern.pattern}")
    print(f"keys:    {', '.join(keys) if keys else '(none)'}")


def run_match(args: argparse.Namespace) -> None:
    """Print the parameters each URL yields, as JSON, or ``no match``."""
    try:
        matcher = resolve_matcher(args.template)
    except InvalidRouteError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    width = max(len(url) for url in args.urls)
    matched = 0
    for url in args.urls:
        params = matcher(url)
        if params is None:
            print(f"{url:<{width}}  no match")
            continue
        matched += 1
        print(f"{url:<{width}}  {json.dumps({str(k): v for k, v in params.items()})}")

    if not matched:
        raise SystemExit(1)
