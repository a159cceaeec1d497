"""Live recompilation of tag sources while the server runs."""

from warble.reload.events import ReloadEvent, ReloadEventBus, TagLoaded, TagLoadFailed
from warble.reload.watcher import TagWatcher, split_glob

__all__ = [
    "ReloadEvent",
    "ReloadEventBus",
    "TagLoadFailed",
    "TagLoaded",
    "TagWatcher",
    "split_glob",
]
