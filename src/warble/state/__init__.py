"""State containers and ordered action dispatch."""

from warble.state.sequencer import apply_actions, normalize_actions
from warble.state.store import (
    Store,
    apply_middleware,
    combine_reducers,
    compose,
    create_store,
    thunk,
)

__all__ = [
    "Store",
    "apply_actions",
    "apply_middleware",
    "combine_reducers",
    "compose",
    "create_store",
    "normalize_actions",
    "thunk",
]
