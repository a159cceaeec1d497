"""Content fingerprints for static assets.

A fingerprint is the first 32 hex characters of the SHA-256 digest of a
file's bytes. Pages append it to asset URLs (``/app.js?h=<fingerprint>``)
so browsers refetch an asset exactly when its contents change.

Fingerprints are memoized for the lifetime of the process and never
invalidated: deployed assets are assumed immutable per deployment, so a
file edited on disk keeps its old fingerprint until restart.

Concurrency:
    Two requests that miss the cache for the same path both read the
    file and both store the result. The value is a pure function of the
    file contents, so the last write wins harmlessly.
"""

import hashlib
import logging
from pathlib import Path

import anyio

from warble.errors import AssetReadError

logger = logging.getLogger("warble.assets")

FINGERPRINT_LENGTH = 32


def checksum(data: bytes) -> str:
    """Return the lowercase hex fingerprint of *data*."""
    return hashlib.sha256(data).hexdigest()[:FINGERPRINT_LENGTH]


def resolve_asset(static_dir: str | Path, url_path: str) -> Path:
    """Map a root-relative asset URL path onto the static directory.

    ``"/css/site.css"`` with ``static_dir="static"`` resolves to
    ``static/css/site.css``. Query strings and fragments are ignored.

    Raises ``AssetReadError`` if the resolved path escapes the directory.
    """
    root = Path(static_dir).resolve()
    relative = url_path.split("?", 1)[0].split("#", 1)[0].lstrip("/")
    file_path = (root / relative).resolve()
    if not file_path.is_relative_to(root):
        raise AssetReadError(url_path)
    return file_path


class FingerprintCache:
    """Process-wide memo of file path -> content fingerprint.

    Usage::

        cache = FingerprintCache()
        fp = await cache.get("static/app.js")
        assert cache.peek("static/app.js") == fp

    There is deliberately no ``invalidate()``.
    """

    __slots__ = ("_hashes",)

    def __init__(self) -> None:
        self._hashes: dict[str, str] = {}

    async def get(self, path: str | Path, *, label: str | None = None) -> str:
        """Return the fingerprint for *path*, reading the file on first use.

        Args:
            path: Filesystem path of the asset.
            label: Name used in error messages instead of *path* (e.g. the
                URL path), so absolute locations never reach clients.

        Raises:
            AssetReadError: The file is missing or unreadable. Failures are
                not cached; the next call tries again.
        """
        key = str(path)
        cached = self._hashes.get(key)
        if cached is not None:
            return cached

        try:
            data = await anyio.Path(key).read_bytes()
        except OSError as exc:
            raise AssetReadError(label or key, exc) from exc

        fingerprint = checksum(data)
        self._hashes[key] = fingerprint
        logger.debug("Fingerprinted %s -> %s", key, fingerprint)
        return fingerprint

    def peek(self, path: str | Path) -> str | None:
        """Return the cached fingerprint for *path* without touching disk."""
        return self._hashes.get(str(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return str(path) in self._hashes

    def __len__(self) -> int:
        return len(self._hashes)
