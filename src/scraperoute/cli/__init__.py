"""scraperoute CLI — inspect route templates and test URLs against them.

Entry point registered as ``scraperoute`` in ``pyproject.toml``::

    [project.scripts]
    scraperoute = "scraperoute.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``scraperoute`` command."""
    parser = argparse.ArgumentParser(
        prog="scraperoute",
        description="scraperoute — route URLs to scraping actions.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # -- scraperoute compile ----------------------------------------------
    compile_parser = subparsers.add_parser(
        "compile", help="Show the regular expression and keys of a template",
    )
    compile_parser.add_argument("template", help="Route template (e.g. /users/:id)")

    # -- scraperoute match ------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Match URLs against a template")
    match_parser.add_argument("template", help="Route template (e.g. /users/:id)")
    match_parser.add_argument("urls", nargs="+", metavar="URL", help="URL paths to test")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "compile":
        from scraperoute.cli._inspect import run_compile

        run_compile(args)
    elif args.command == "match":
        from scraperoute.cli._inspect import run_match

        run_match(args)
