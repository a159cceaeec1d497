"""Static file serving middleware.

Serves files from the static directory. Asset URLs written into rendered
pages carry an ``h=<fingerprint>`` query; those responses are marked
immutable, since a changed file gets a new URL.

Falls through to the next handler for non-matching paths, so with the
root prefix (``"/"``) routes and static files share one URL space.
"""

import mimetypes
from pathlib import Path

import anyio

from warble.http.request import Request
from warble.http.response import Response
from warble.middleware.protocol import Next

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


class StaticFiles:
    """Middleware that serves static files from a directory.

    Security: resolves symlinks and verifies the final path is within the
    configured directory to prevent path traversal.

    Usage::

        app.add_middleware(StaticFiles(directory="./static", prefix="/"))
    """

    __slots__ = ("_cache_control", "_directory", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/",
        *,
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._cache_control = cache_control

        # Root prefix "/" normalizes to ""
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if self._prefix:
            if not path.startswith(self._prefix + "/"):
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        if not relative:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403, content_type="text/plain; charset=utf-8")

        if not file_path.is_file():
            return await next(request)

        fingerprinted = request.query_param("h") is not None
        return await self._serve_file(file_path, immutable=fingerprinted)

    async def _serve_file(self, file_path: Path, *, immutable: bool) -> Response:
        content_type, _ = mimetypes.guess_type(str(file_path))
        body = await anyio.Path(file_path).read_bytes()
        cache_control = IMMUTABLE_CACHE_CONTROL if immutable else self._cache_control
        return Response(
            body=body,
            content_type=content_type or "application/octet-stream",
        ).with_header("Cache-Control", cache_control)
