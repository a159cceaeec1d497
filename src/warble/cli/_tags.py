"""``warble tags`` — compile every tag in a directory and report.

Exits non-zero on the first compile error or name collision, so it can
gate CI before a deploy.
"""

import argparse
import sys

from warble.errors import WarbleError
from warble.tags.discovery import load_tags
from warble.tags.registry import TagRegistry


def check_tags(args: argparse.Namespace) -> None:
    """Compile ``args.directory`` into a scratch registry and list the tags."""
    registry = TagRegistry()
    try:
        units = load_tags(registry, args.directory, args.pattern)
    except (FileNotFoundError, WarbleError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    for unit in sorted(units, key=lambda u: u.name):
        print(f"{unit.name:<24} {unit.source_path}")
    print(f"{len(units)} tag(s) compiled")
