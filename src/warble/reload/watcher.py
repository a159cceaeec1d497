"""Hot reload of tag sources during development.

Watches a tags directory (or a glob such as ``"tags/**/*.tag"``) with
``watchfiles`` and recompiles each added or modified file into the live
registry. Every attempt is reported on a ``ReloadEventBus``.

A file that fails to compile, or that claims a name owned by another
file, produces a ``TagLoadFailed`` event and nothing else: the
registry keeps serving the previous unit. Deleted files are ignored and
their units stay registered until restart.
"""

import logging
from pathlib import Path, PurePosixPath

import anyio
import anyio.to_thread
from watchfiles import Change, awatch

from warble.errors import WarbleError
from warble.reload.events import ReloadEvent, ReloadEventBus, TagLoaded, TagLoadFailed
from warble.tags.discovery import matches_pattern
from warble.tags.registry import TagRegistry

logger = logging.getLogger("warble.reload")

_GLOB_CHARS = frozenset("*?[")


def split_glob(target: str | Path) -> tuple[str, str | None]:
    """Split a watch target into its root directory and file pattern.

    ``"tags/**/*.tag"`` -> ``("tags", "**/*.tag")``; a plain directory
    has no pattern.
    """
    parts = PurePosixPath(Path(target).as_posix()).parts
    for i, part in enumerate(parts):
        if _GLOB_CHARS.intersection(part):
            root = PurePosixPath(*parts[:i]) if i else PurePosixPath(".")
            return str(root), "/".join(parts[i:])
    return str(target), None


class TagWatcher:
    """Recompile tags into a registry as their files change.

    Usage::

        watcher = TagWatcher(app.tags, "tags/**/*.tag")
        watcher.bus.add_listener(print)
        async with anyio.create_task_group() as tg:
            tg.start_soon(watcher.run)
            ...
            watcher.stop()
    """

    __slots__ = ("_stop", "bus", "pattern", "registry", "root")

    def __init__(
        self,
        registry: TagRegistry,
        target: str | Path,
        *,
        pattern: str | None = None,
        bus: ReloadEventBus | None = None,
    ) -> None:
        root, globbed = split_glob(target)
        self.registry = registry
        self.root = Path(root).resolve()
        self.pattern = pattern or globbed or "*.tag"
        self.bus = bus or ReloadEventBus()
        self._stop: anyio.Event | None = None

    def accepts(self, path: str | Path) -> bool:
        """Whether *path* is a tag source this watcher reloads."""
        try:
            relative = Path(path).resolve().relative_to(self.root)
        except ValueError:
            return False
        if any(part.startswith(("_", ".")) for part in relative.parts[:-1]):
            return False
        return matches_pattern(relative.as_posix(), self.pattern)

    async def handle_change(self, kind: str, path: str | Path) -> ReloadEvent | None:
        """Apply one file change. ``kind`` is ``added``, ``modified`` or ``deleted``.

        Returns the emitted event, or ``None`` when the change is ignored.
        """
        if kind == "deleted":
            logger.debug("Ignoring deleted tag file %s", path)
            return None
        if kind not in ("added", "modified"):
            raise ValueError(f"Unknown change kind: {kind!r}")

        event: ReloadEvent
        try:
            unit = await anyio.to_thread.run_sync(self.registry.load, path)
        except WarbleError as exc:
            logger.warning("Reload of %s failed: %s", path, exc)
            event = TagLoadFailed(error=exc, path=str(path))
        except Exception as exc:
            logger.exception("Unexpected error reloading %s", path)
            event = TagLoadFailed(error=exc, path=str(path))
        else:
            logger.info("Reloaded tag %r from %s", unit.name, unit.source_path)
            event = TagLoaded(name=unit.name, path=unit.source_path)

        await self.bus.emit(event)
        return event

    async def run(self) -> None:
        """Watch until ``stop()`` is called or the task is cancelled."""
        self._stop = anyio.Event()
        logger.info("Watching %s for %s changes", self.root, self.pattern)
        async for changes in awatch(self.root, watch_filter=self._filter, stop_event=self._stop):
            for change, path in sorted(changes, key=lambda c: c[1]):
                await self.handle_change(change.name, path)
        logger.debug("Stopped watching %s", self.root)

    def stop(self) -> None:
        if self._stop is not None:
            self._stop.set()

    def _filter(self, change: Change, path: str) -> bool:  # noqa: ARG002
        return self.accepts(path)
