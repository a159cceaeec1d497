"""``warble run`` — development server command."""

import argparse
import logging
import sys

from warble.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with the pounce dev server.

    Tags compile before the server starts, so a broken tag fails here
    with a readable message instead of on the first request.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from warble.errors import WarbleError

    try:
        app._ensure_frozen()
    except WarbleError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from warble.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        app_path=args.app,
        log_level=app.config.log_level,
    )
