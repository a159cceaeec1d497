"""Startup discovery of tag source files.

Walks a tags directory and compiles every file matching the pattern into
the registry before the app serves its first request. Errors are fatal
here: a tag that does not compile, or two files declaring one name, stop
startup. (During hot reload the same errors are reported as events
instead; see ``warble.reload``.)

Directories whose names start with ``_`` or ``.`` are skipped, as in
page discovery.
"""

from fnmatch import fnmatch
from pathlib import Path

from warble.tags.compiler import TagUnit
from warble.tags.registry import TagRegistry


def matches_pattern(relative: str, pattern: str) -> bool:
    """Whether a root-relative POSIX path matches a tag file pattern.

    Patterns without a slash match the file name at any depth
    (``"*.tag"``). Patterns with a slash match the relative path, and a
    leading ``**/`` also matches files directly under the root.
    """
    if "/" not in pattern:
        return fnmatch(relative.rsplit("/", 1)[-1], pattern)
    if fnmatch(relative, pattern):
        return True
    return pattern.startswith("**/") and fnmatch(relative, pattern[3:])


def discover_tags(root: str | Path, pattern: str = "*.tag") -> list[Path]:
    """Return every tag source file under *root*, sorted.

    Raises:
        FileNotFoundError: *root* is not a directory.
    """
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise FileNotFoundError(f"Tags directory not found: {root_path}")

    found: list[Path] = []
    _walk(root_path, root_path, pattern, found)
    return found


def _walk(directory: Path, root: Path, pattern: str, found: list[Path]) -> None:
    for item in sorted(directory.iterdir()):
        if item.is_dir():
            if item.name.startswith(("_", ".")):
                continue
            _walk(item, root, pattern, found)
        elif item.is_file() and matches_pattern(item.relative_to(root).as_posix(), pattern):
            found.append(item)


def load_tags(registry: TagRegistry, root: str | Path, pattern: str = "*.tag") -> list[TagUnit]:
    """Compile and register every tag under *root*.

    Raises:
        CompileError: A tag failed to compile.
        DuplicateNameError: Two files declare the same tag name.
    """
    return [registry.load(path) for path in discover_tags(root, pattern)]
