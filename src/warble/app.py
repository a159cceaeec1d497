"""Warble application class.

Mutable during setup (routes, middleware, error handlers, hooks).
Frozen at runtime when app.run() or __call__() is first invoked: the
route table compiles, every tag under ``config.tag_dirs`` compiles into
the registry, and the render pipeline is built.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
from anyio.abc import TaskGroup

from warble._internal.asgi import Receive, Scope, Send
from warble._internal.invoke import invoke
from warble.assets.fingerprint import FingerprintCache
from warble.config import AppConfig
from warble.errors import ConfigurationError
from warble.http.response import Response
from warble.middleware.protocol import Middleware
from warble.middleware.static import StaticFiles
from warble.reload.events import ReloadEventBus
from warble.reload.watcher import TagWatcher
from warble.rendering.pipeline import RenderDefaults, RenderPipeline
from warble.rendering.returns import Tag
from warble.routing.route import Route
from warble.routing.router import Router
from warble.server.handler import handle_request
from warble.state.store import Enhancer, Reducer
from warble.tags.compiler import CompilerOptions, TagCompiler
from warble.tags.discovery import load_tags
from warble.tags.registry import TagRegistry

logger = logging.getLogger("warble.server")

type Handler = Callable[..., Any]


def _keep_state(state: Any, action: Any) -> Any:  # noqa: ARG001
    """Default reducer: ignores actions, starts from an empty dict."""
    return {} if state is None else state


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The warble application.

    Usage::

        app = App(AppConfig(debug=True), reducer=reducer, enhancer=apply_middleware(thunk))

        @app.route("/")
        def home():
            return Tag("home", {"type": "load_home"})

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app.
    """

    __slots__ = (
        "_error_handlers",
        "_fingerprints",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_pipeline",
        "_reload_events",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_tags",
        "_watchers",
        "config",
        "enhancer",
        "reducer",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        reducer: Reducer | None = None,
        enhancer: Enhancer | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.reducer: Reducer = reducer or _keep_state
        self.enhancer = enhancer
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, Callable[..., Any]] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Shared for the process lifetime; created eagerly so tags can be
        # registered and reload listeners attached before freeze.
        self._tags = TagRegistry(
            TagCompiler(
                CompilerOptions(
                    autoescape=self.config.autoescape,
                    trim_blocks=self.config.trim_blocks,
                    lstrip_blocks=self.config.lstrip_blocks,
                    resolve_imports=self.config.resolve_imports,
                    search_paths=tuple(self.config.tag_dirs),
                )
            )
        )
        self._fingerprints = FingerprintCache()
        self._reload_events = ReloadEventBus()
        self._watchers: list[TagWatcher] = []

        # Compiled state — set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._pipeline: RenderPipeline | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` or ``{param:int}``
                for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Handler], Handler]:
        """Register an error handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after tags are compiled and before the first request.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Tags and rendering --

    @property
    def tags(self) -> TagRegistry:
        """The process-wide tag registry."""
        return self._tags

    @property
    def fingerprints(self) -> FingerprintCache:
        """The process-wide asset fingerprint cache."""
        return self._fingerprints

    @property
    def reload_events(self) -> ReloadEventBus:
        """Reload outcomes from the tag watcher.

        Usage::

            app.reload_events.add_listener(lambda event: print(event))
        """
        return self._reload_events

    async def render_tag(self, name: str, actions: Any = None, **options: Any) -> Response:
        """Render tag *name* as a full page outside of a route handler.

        Accepts the same options as ``Tag``. Never raises for render
        failures; those come back as 500 responses.
        """
        self._ensure_frozen()
        assert self._pipeline is not None
        return await self._pipeline.render(Tag(name, actions=actions, **options).to_request())

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and start the pounce development server."""
        self._ensure_frozen()

        from warble.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            pipeline=self._pipeline,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,  # noqa: ARG002
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, runs startup hooks, and starts the tag
        watchers when ``config.watching``. On shutdown, runs shutdown
        hooks, then stops the watchers.
        """
        async with anyio.create_task_group() as tg:
            while True:
                message = await receive()
                msg_type = message["type"]

                if msg_type == "lifespan.startup":
                    try:
                        self._ensure_frozen()
                        await self.startup(tg)
                    except Exception as exc:
                        logger.exception("Startup failed")
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        tg.cancel_scope.cancel()
                        return
                    await send({"type": "lifespan.startup.complete"})

                elif msg_type == "lifespan.shutdown":
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                    tg.cancel_scope.cancel()
                    return

    async def startup(self, tg: TaskGroup | None = None) -> None:
        """Run startup hooks and, given a task group, start the tag watchers."""
        for hook in self._startup_hooks:
            await invoke(hook)

        if tg is not None and self.config.watching:
            for tag_dir in self._existing_tag_dirs():
                watcher = TagWatcher(
                    self._tags,
                    tag_dir,
                    pattern=self.config.tag_pattern,
                    bus=self._reload_events,
                )
                self._watchers.append(watcher)
                tg.start_soon(watcher.run)

    async def shutdown(self) -> None:
        """Run shutdown hooks and stop the tag watchers."""
        for hook in self._shutdown_hooks:
            await invoke(hook)
        for watcher in self._watchers:
            watcher.stop()
        self._watchers.clear()
        self._reload_events.close()

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify the app after it has started serving requests."
            raise RuntimeError(msg)

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.

        Raises:
            CompileError: A tag failed to compile.
            DuplicateNameError: Two tag files declare the same name.
            ConfigurationError: A route path is invalid.
        """
        config = self.config

        # 1. Compile route table
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(Route(path=pending.path, handler=pending.handler, methods=methods, name=pending.name))
        router.compile()

        # 2. Middleware: user middleware outermost, static files innermost
        middleware_list: list[Callable[..., Any]] = list(self._middleware_list)
        if config.static_dir is not None and Path(config.static_dir).is_dir():
            middleware_list.append(StaticFiles(config.static_dir, prefix=config.static_url))

        # 3. Compile every tag; errors here are fatal
        for tag_dir in config.tag_dirs:
            if not Path(tag_dir).is_dir():
                logger.info("Tags directory %s not found; skipping", tag_dir)
                continue
            units = load_tags(self._tags, tag_dir, config.tag_pattern)
            logger.info("Loaded %d tag(s) from %s", len(units), tag_dir)

        # 4. Render pipeline
        if config.render_timeout is not None and config.render_timeout <= 0:
            msg = f"render_timeout must be positive, got {config.render_timeout}"
            raise ConfigurationError(msg)
        pipeline = RenderPipeline(
            self._tags,
            self._fingerprints,
            reducer=self.reducer,
            enhancer=self.enhancer,
            static_dir=config.static_dir,
            static_url=config.static_url,
            defaults=RenderDefaults(
                stylesheets=tuple(config.stylesheets),
                scripts=tuple(config.scripts),
                head=config.html_header,
                path_prefix=config.path_prefix,
                timeout=config.render_timeout,
            ),
        )

        self._router = router
        self._middleware = tuple(middleware_list)
        self._pipeline = pipeline
        self._frozen = True

    def _existing_tag_dirs(self) -> list[Path]:
        return [Path(d) for d in self.config.tag_dirs if Path(d).is_dir()]
