"""Invoke helpers — call sync or async callables uniformly.

Route handlers, error handlers, and lifecycle hooks can be ``def`` or
``async def``. This module keeps the sync/async check in one place.

Usage::

    from warble._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
