"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            debug=True,
            tag_dirs=("tags",),
            stylesheets=("/css/site.css",),
            scripts=("/js/bundle.js",),
        )

    The reducer and store enhancer are passed to ``App()`` directly since
    they are callables, not settings.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Tags
    tag_dirs: tuple[str | Path, ...] = ("tags",)
    tag_pattern: str = "*.tag"
    watch_tags: bool | None = None  # None follows debug

    # Tag compilation (passed through to kida)
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    resolve_imports: bool = False  # When False, tags cannot {% include %} other files

    # Static files
    static_dir: str | Path | None = "static"
    static_url: str = "/"  # URL prefix StaticFiles serves static_dir under

    # Page assembly
    stylesheets: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    html_header: str = ""  # Raw markup placed in every page's <head>
    path_prefix: str = ""  # Prepended to root-relative asset URLs

    # Seconds allowed for action dispatch + asset hashing (None = unbounded)
    render_timeout: float | None = None

    # Logging
    log_level: str = "info"

    @property
    def watching(self) -> bool:
        """Whether the hot-reload watcher should run."""
        if self.watch_tags is None:
            return self.debug
        return self.watch_tags
