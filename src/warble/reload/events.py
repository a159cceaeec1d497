"""Reload event bus — async broadcast of tag reload outcomes.

The watcher reports every reload attempt as an event instead of raising:
a bad edit must never stop the server. Subscribers range from dev
tooling streaming events to the browser to tests asserting on them.

Free-threading safety:
    - TagLoaded / TagLoadFailed are frozen dataclasses (safe to share)
    - ReloadEventBus uses a Lock to protect the subscriber and listener sets
    - Each subscriber gets its own asyncio.Queue (no shared mutable state)
"""

import asyncio
import logging
import threading
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

logger = logging.getLogger("warble.reload")


@dataclass(frozen=True, slots=True)
class TagLoaded:
    """A tag file was recompiled and its unit republished."""

    name: str
    path: str
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class TagLoadFailed:
    """A tag file could not be reloaded. The previous unit stays live."""

    error: Exception
    path: str
    timestamp: float = field(default_factory=time.time)


type ReloadEvent = TagLoaded | TagLoadFailed
type ReloadListener = Callable[[ReloadEvent], None]


class ReloadEventBus:
    """Broadcast channel for reload events.

    Async consumers iterate ``subscribe()``; each subscription is backed
    by its own bounded ``asyncio.Queue``. Synchronous callbacks register
    with ``add_listener()`` and run inline on ``emit()``.

    Usage::

        async for event in bus.subscribe():
            if isinstance(event, TagLoadFailed):
                print(event.error)
    """

    __slots__ = ("_listeners", "_lock", "_subscribers")

    def __init__(self) -> None:
        self._subscribers: set[asyncio.Queue[ReloadEvent | None]] = set()
        self._listeners: list[ReloadListener] = []
        self._lock = threading.Lock()

    async def emit(self, event: ReloadEvent) -> None:
        """Deliver *event* to every listener and subscriber."""
        with self._lock:
            listeners = list(self._listeners)
            subscribers = set(self._subscribers)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Reload listener %r failed", listener)
        for queue in subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                # Slow consumers lose events rather than stall the watcher
                pass

    def add_listener(self, listener: ReloadListener) -> Callable[[], None]:
        """Call *listener* for every event. Returns a remover."""
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    async def subscribe(self) -> AsyncIterator[ReloadEvent]:
        """Yield events as they are emitted, until ``close()``."""
        queue: asyncio.Queue[ReloadEvent | None] = asyncio.Queue(maxsize=256)
        with self._lock:
            self._subscribers.add(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            with self._lock:
                self._subscribers.discard(queue)

    def close(self) -> None:
        """End every active subscription."""
        with self._lock:
            for queue in self._subscribers:
                if queue.full():
                    # Make room for the end-of-stream marker
                    queue.get_nowait()
                queue.put_nowait(None)
            self._subscribers.clear()
