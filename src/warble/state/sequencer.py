"""Ordered action dispatch for one render request.

Actions are applied strictly one at a time in input order. When a
dispatch returns an awaitable (an async thunk, for example), it is
awaited before the next action starts, so later actions always see the
state earlier ones produced.

The first failing action aborts the sequence with ``ActionError``.
Actions already applied stay applied; the store is discarded along with
the failed request.
"""

import inspect
from collections.abc import Iterable, Mapping
from typing import Any

from warble.errors import ActionError
from warble.state.store import Store


def normalize_actions(actions: Any) -> tuple[Any, ...]:
    """Accept ``None``, a single action, or a sequence of actions."""
    if actions is None:
        return ()
    if isinstance(actions, Mapping) or callable(actions):
        return (actions,)
    if isinstance(actions, (str, bytes)):
        msg = f"Expected an action or a sequence of actions, got {type(actions).__name__}"
        raise TypeError(msg)
    if isinstance(actions, Iterable):
        return tuple(actions)
    return (actions,)


async def apply_actions(store: Store, actions: Iterable[Any]) -> None:
    """Dispatch *actions* into *store* sequentially.

    Raises:
        ActionError: Wrapping whatever the failing dispatch raised.
    """
    for index, action in enumerate(actions):
        try:
            result = store.dispatch(action)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            raise ActionError(index, action, exc) from exc
