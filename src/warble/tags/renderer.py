"""Server-side rendering of compiled tags.

Tags render against the request's store. The template context is::

    state      the store's current state (the final snapshot)
    store      the store itself, for tags that need ``store.get_state()``
    opts       options passed by a parent tag (empty for the root)
    is_server  always True here; client-side code renders with False
    tag_name   the name of the tag being rendered
    child      child(name, **opts) renders another registered tag inline

Rendering is synchronous: by the time a tag renders, every action for
the request has been applied, so nothing here awaits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kida.utils.html import Markup

from warble.errors import UnknownUnitError
from warble.tags.compiler import TagUnit

if TYPE_CHECKING:
    from warble.state.store import Store
    from warble.tags.registry import TagRegistry

# Nesting limit for child() so a tag that includes itself fails fast
MAX_DEPTH = 32


def render_unit(
    unit: TagUnit,
    store: Store,
    *,
    registry: TagRegistry | None = None,
    opts: dict[str, Any] | None = None,
    is_server: bool = True,
    _depth: int = 0,
) -> str:
    """Render *unit* against *store* and return the HTML fragment."""
    if _depth > MAX_DEPTH:
        msg = f"Tag nesting deeper than {MAX_DEPTH} levels at {unit.name!r}"
        raise RecursionError(msg)

    def child(name: str, **child_opts: Any) -> Markup:
        if registry is None:
            msg = f"Cannot render child tag {name!r} without a registry"
            raise RuntimeError(msg)
        nested = registry.lookup(name)
        if nested is None:
            raise UnknownUnitError(name)
        html = render_unit(
            nested,
            store,
            registry=registry,
            opts=child_opts,
            is_server=is_server,
            _depth=_depth + 1,
        )
        return Markup(html)

    context = {
        "state": store.get_state(),
        "store": store,
        "opts": opts or {},
        "is_server": is_server,
        "tag_name": unit.name,
        "child": child,
    }
    return unit.render(context)
