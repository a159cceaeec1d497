"""Tags — compiled, named UI components.

Public API::

    from warble.tags import TagCompiler, TagRegistry, load_tags

    registry = TagRegistry(TagCompiler())
    load_tags(registry, "tags")
"""

from warble.tags.compiler import CompilerOptions, TagCompiler, TagUnit, declared_name
from warble.tags.discovery import discover_tags, load_tags
from warble.tags.registry import TagRegistry
from warble.tags.renderer import render_unit

__all__ = [
    "CompilerOptions",
    "TagCompiler",
    "TagRegistry",
    "TagUnit",
    "declared_name",
    "discover_tags",
    "load_tags",
    "render_unit",
]
