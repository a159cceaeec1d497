"""Warble CLI — dev server and tag checking.

Entry point registered as ``warble`` in ``pyproject.toml``::

    [project.scripts]
    warble = "warble.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``warble`` command."""
    parser = argparse.ArgumentParser(
        prog="warble",
        description="Warble — server-rendered tags with per-request state.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- warble run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- warble tags ------------------------------------------------------
    tags_parser = subparsers.add_parser("tags", help="Compile every tag in a directory")
    tags_parser.add_argument("directory", help="Tags directory")
    tags_parser.add_argument("--pattern", default="*.tag", help="Tag file pattern (default: *.tag)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from warble.cli._run import run_server

        run_server(args)
    elif args.command == "tags":
        from warble.cli._tags import check_tags

        check_tags(args)
