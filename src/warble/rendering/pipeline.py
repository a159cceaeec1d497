"""Render pipeline — actions + fingerprints in, full HTML page out.

For each render request:

1. Create a fresh store for this request only.
2. Concurrently (one anyio task group):
   - apply the request's actions to the store, strictly in order;
   - fingerprint every stylesheet and script, all in parallel.
3. If any of that fails, respond 500 ``Error while dispatching actions: ...``.
   Fingerprints computed so far are discarded.
4. Take the state snapshot.
5. Look up the tag; render it in server mode against the store.
6. Resolve the status and extra head markup against the snapshot.
7. Assemble the page and respond.

Any exception in steps 4-7 is logged with its traceback and becomes a
500. Nothing is retried.

Timeouts:
    Steps 2-3 have no time limit by default. ``RenderDefaults.timeout``
    bounds them with ``anyio.fail_after``; expiry is reported like any
    other dispatch failure.
"""

import contextlib
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import anyio

from warble.assets.fingerprint import FingerprintCache, resolve_asset
from warble.errors import UnknownUnitError, WarbleError
from warble.http.response import Response, plain_text
from warble.rendering.document import build_document
from warble.rendering.options import resolve
from warble.rendering.returns import RenderOptions, RenderRequest
from warble.state.sequencer import apply_actions
from warble.state.store import Enhancer, Reducer, Store, create_store
from warble.tags.registry import TagRegistry
from warble.tags.renderer import render_unit

logger = logging.getLogger("warble.render")


class RenderPhase(Enum):
    """Lifecycle of one render request."""

    CREATED = "created"
    DISPATCHING = "dispatching"
    RENDERING = "rendering"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RenderDefaults:
    """App-level page defaults, overridable per response."""

    stylesheets: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    head: str = ""
    path_prefix: str = ""
    timeout: float | None = None


class DispatchTimeout(WarbleError):
    """Action dispatch and asset hashing exceeded the configured timeout."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f"timed out after {seconds:g}s")


class RenderPipeline:
    """Renders tags into full pages.

    Constructed once per app with the shared registry and fingerprint
    cache. Holds no per-request state, so concurrent renders only share
    those two structures.

    Usage::

        pipeline = RenderPipeline(registry, FingerprintCache(), reducer=reducer,
                                  static_dir="static")
        response = await pipeline.render(RenderRequest("home"))
    """

    __slots__ = ("defaults", "enhancer", "fingerprints", "reducer", "registry", "static_dir", "static_url")

    def __init__(
        self,
        registry: TagRegistry,
        fingerprints: FingerprintCache,
        *,
        reducer: Reducer,
        enhancer: Enhancer | None = None,
        static_dir: str | Path | None = "static",
        static_url: str = "/",
        defaults: RenderDefaults | None = None,
    ) -> None:
        self.registry = registry
        self.fingerprints = fingerprints
        self.reducer = reducer
        self.enhancer = enhancer
        self.static_dir = static_dir
        self.static_url = static_url
        self.defaults = defaults or RenderDefaults()

    def create_store(self) -> Store:
        """A fresh store for one request."""
        return create_store(self.reducer, self.enhancer)

    async def render(self, request: RenderRequest) -> Response:
        """Run the full pipeline for *request*. Never raises."""
        options = request.options
        stylesheets = _pick(options.stylesheets, self.defaults.stylesheets)
        scripts = _pick(options.scripts, self.defaults.scripts)
        phase = RenderPhase.CREATED

        try:
            store = self.create_store()
            phase = RenderPhase.DISPATCHING
            fingerprints = await self._prepare(store, request.actions, (*stylesheets, *scripts))
        except Exception as exc:
            _log_failure(request, phase, exc)
            return plain_text(f"Error while dispatching actions: {exc}", 500)

        phase = RenderPhase.RENDERING
        try:
            response = self._render_page(store, request, options, stylesheets, scripts, fingerprints)
        except Exception as exc:
            _log_failure(request, phase, exc)
            detail = str(exc) if isinstance(exc, WarbleError) else "Internal Server Error"
            return plain_text(f"Error while rendering: {detail}", 500)

        logger.debug("Tag %r %s with %d", request.tag_name, RenderPhase.RESPONDED.value, response.status)
        return response

    async def _prepare(
        self,
        store: Store,
        actions: tuple[Any, ...],
        paths: tuple[str, ...],
    ) -> dict[str, str]:
        """Apply actions and fingerprint assets concurrently.

        Raises the first failure from either branch.
        """
        fingerprints: dict[str, str] = {}

        async def _fingerprint(path: str) -> None:
            fingerprints[path] = await self.fingerprints.get(self._asset_path(path), label=path)

        try:
            with _deadline(self.defaults.timeout):
                async with anyio.create_task_group() as tg:
                    tg.start_soon(apply_actions, store, actions)
                    for path in paths:
                        tg.start_soon(_fingerprint, path)
        except ExceptionGroup as group:
            raise _first_error(group) from None
        except TimeoutError as exc:
            raise DispatchTimeout(self.defaults.timeout or 0) from exc

        return fingerprints

    def _render_page(
        self,
        store: Store,
        request: RenderRequest,
        options: RenderOptions,
        stylesheets: tuple[str, ...],
        scripts: tuple[str, ...],
        fingerprints: dict[str, str],
    ) -> Response:
        state = store.get_state()

        unit = self.registry.lookup(request.tag_name)
        if unit is None:
            raise UnknownUnitError(request.tag_name)

        markup = render_unit(unit, store, registry=self.registry)

        status = resolve(options.status, state, default=200)
        extra_head = resolve(options.head, state, default="")
        head = "\n    ".join(part for part in (self.defaults.head, extra_head) if part)
        path_prefix = _pick(options.path_prefix, self.defaults.path_prefix)

        document = build_document(
            tag_name=request.tag_name,
            markup=markup,
            state=state,
            stylesheets=stylesheets,
            scripts=scripts,
            fingerprints=fingerprints,
            head=head,
            path_prefix=path_prefix,
        )
        return Response(body=document, status=int(status))

    def _asset_path(self, url_path: str) -> Path:
        """Filesystem location of an asset referenced by URL path."""
        if self.static_dir is None:
            return Path(url_path)
        prefix = self.static_url.rstrip("/")
        if prefix and url_path.startswith(prefix + "/"):
            url_path = url_path[len(prefix) :]
        return resolve_asset(self.static_dir, url_path)


def _pick[T](value: T | None, default: T) -> T:
    return default if value is None else value


def _deadline(seconds: float | None) -> contextlib.AbstractContextManager[Any]:
    """``anyio.fail_after`` when *seconds* is set, a no-op otherwise."""
    if seconds is None:
        return contextlib.nullcontext()
    return anyio.fail_after(seconds)


def _first_error(group: BaseExceptionGroup) -> BaseException:
    """The first leaf exception in a (possibly nested) exception group."""
    first = group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first


def _log_failure(request: RenderRequest, phase: RenderPhase, exc: BaseException) -> None:
    logger.error(
        "Tag %r %s while %s",
        request.tag_name,
        RenderPhase.FAILED.value,
        phase.value,
        exc_info=exc,
    )
