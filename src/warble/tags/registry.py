"""Tag registry — name -> compiled unit, with collision detection.

``TagUnit`` is the frozen definition, ``TagRegistry`` the lookup table.
The registry stays writable at runtime: the reload watcher republishes
units while requests are being served.

A name belongs to the first source file that registers it. Another file
claiming the same name is a ``DuplicateNameError``; the same file
registering again (a hot reload) replaces its unit.

Entries are never removed. A deleted tag file keeps serving its last
unit until the process restarts.

Free-threading safety:
    - TagUnit is a frozen dataclass (immutable)
    - ``register`` runs its ownership check and write under a Lock, so a
      concurrent ``lookup`` sees either the old or the new unit
    - ``lookup`` is a single dict read and takes no lock
"""

import logging
import threading
from pathlib import Path

from warble.errors import DuplicateNameError
from warble.tags.compiler import TagCompiler, TagUnit

logger = logging.getLogger("warble.tags")


class TagRegistry:
    """Process-wide table of compiled tags.

    Usage::

        registry = TagRegistry(TagCompiler())
        registry.load("tags/home.tag")
        unit = registry.lookup("home")
    """

    __slots__ = ("_lock", "_units", "compiler")

    def __init__(self, compiler: TagCompiler | None = None) -> None:
        self.compiler = compiler or TagCompiler()
        self._units: dict[str, TagUnit] = {}
        self._lock = threading.Lock()

    def compile(self, path: str | Path) -> TagUnit:
        """Compile the tag at *path* without registering it.

        The path is resolved first so the same file reached through
        different relative paths keeps one owner identity.

        Raises ``CompileError``. The registry is never touched.
        """
        return self.compiler.compile_file(Path(path).resolve())

    def register(self, unit: TagUnit) -> None:
        """Insert or replace the unit for ``unit.name``.

        Raises:
            DuplicateNameError: A different source file already owns
                ``unit.name``. The registry is left unchanged.
        """
        with self._lock:
            existing = self._units.get(unit.name)
            if existing is not None and existing.source_path != unit.source_path:
                raise DuplicateNameError(unit.name, existing.source_path, unit.source_path)
            self._units[unit.name] = unit

        action = "Reloaded" if existing is not None else "Registered"
        logger.debug("%s tag %r from %s", action, unit.name, unit.source_path)

    def load(self, path: str | Path) -> TagUnit:
        """Compile *path* and register the result."""
        unit = self.compile(path)
        self.register(unit)
        return unit

    def lookup(self, name: str) -> TagUnit | None:
        """Return the unit registered as *name*, or ``None``."""
        return self._units.get(name)

    def names(self) -> list[str]:
        """Registered tag names, sorted."""
        return sorted(self._units)

    def owner(self, name: str) -> str | None:
        """Source path that owns *name*, if registered."""
        unit = self._units.get(name)
        return unit.source_path if unit is not None else None

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)
