"""Warble exception hierarchy.

Shared across the router, the tag registry, the render pipeline, and the
reload watcher so every module raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when app configuration is invalid.

    Typically caught during ``App._freeze()`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WarbleError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or handlers. The ASGI handler catches these and
    dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )


# -- Tag pipeline errors --


class AssetReadError(WarbleError):
    """A static asset referenced by a page could not be read.

    ``path`` is the URL path as written in the page (never the absolute
    filesystem location), so the message is safe to show to clients.
    """

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        reason = f": {cause.strerror}" if isinstance(cause, OSError) and cause.strerror else ""
        super().__init__(f"Cannot read asset {path!r}{reason}")


class CompileError(WarbleError):
    """A tag source file failed to compile.

    Wraps the template engine's diagnostic in ``detail``.
    """

    def __init__(self, path: str | Path, detail: str) -> None:
        self.path = str(path)
        self.detail = detail
        super().__init__(f"Cannot compile tag {self.path}: {detail}")


class DuplicateNameError(WarbleError):
    """Two different source files declare the same tag name."""

    def __init__(self, name: str, existing_path: str, new_path: str) -> None:
        self.name = name
        self.existing_path = existing_path
        self.new_path = new_path
        super().__init__(
            f"Duplicated tag {name!r} found in files {existing_path} and {new_path}"
        )


class UnknownUnitError(WarbleError):
    """A render request named a tag that is not in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tag {name!r}")


class ActionError(WarbleError):
    """Dispatching an action into the request's store failed.

    ``index`` is the position of the failing action in the request's
    action sequence; actions before it stay applied.
    """

    def __init__(self, index: int, action: Any, cause: BaseException) -> None:
        self.index = index
        self.action = action
        self.cause = cause
        super().__init__(f"Action #{index} ({_describe(action)}) failed: {cause}")


def _describe(action: Any) -> str:
    if isinstance(action, dict) and "type" in action:
        return repr(action["type"])
    if callable(action):
        return getattr(action, "__name__", type(action).__name__)
    return type(action).__name__
