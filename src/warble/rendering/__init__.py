"""Full-page rendering of registered tags.

Public API::

    from warble.rendering import Computed, RenderPipeline, Tag

    return Tag("todo-list", {"type": "load"}, status=Computed(status_for))
"""

from warble.rendering.document import build_document
from warble.rendering.options import Computed, Value, as_option, resolve
from warble.rendering.pipeline import DispatchTimeout, RenderDefaults, RenderPhase, RenderPipeline
from warble.rendering.returns import RenderOptions, RenderRequest, Tag

__all__ = [
    "Computed",
    "DispatchTimeout",
    "RenderDefaults",
    "RenderOptions",
    "RenderPhase",
    "RenderPipeline",
    "RenderRequest",
    "Tag",
    "Value",
    "as_option",
    "build_document",
    "resolve",
]
