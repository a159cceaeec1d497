"""Tag compilation — source text to a renderable unit.

A tag file is a kida template whose outermost element names the tag::

    <todo-list>
      <h1>{{ state.title }}</h1>
      <ul>{% for todo in state.todos %}<li>{{ todo }}</li>{% end %}</ul>
    </todo-list>

declares the tag ``todo-list``. Leading HTML comments and kida comments
are allowed before the root element.

The compiler owns one kida ``Environment``. With ``resolve_imports``
disabled (the default) the environment has no loader, so a tag cannot
pull in other files through ``{% include %}`` or ``{% import %}``; with it
enabled, ``search_paths`` feed a ``FileSystemLoader``.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from warble.errors import CompileError

# Comments that may precede the root element
_LEADING_NOISE_RE = re.compile(r"\A(?:\s+|<!--.*?-->|\{#.*?#\})*", re.DOTALL)

# Opening root element: <todo-list ...>
_ROOT_OPEN_RE = re.compile(r"<([A-Za-z][\w:.-]*)(?:\s[^>]*)?>")


@dataclass(frozen=True, slots=True)
class CompilerOptions:
    """Options for the kida environment tags are compiled in."""

    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    resolve_imports: bool = False
    search_paths: tuple[str | Path, ...] = ()


@dataclass(frozen=True, slots=True)
class TagUnit:
    """A compiled tag. Immutable; recompiling produces a new unit."""

    name: str
    template: Any  # kida Template
    source_path: str
    source: str = ""

    def render(self, context: dict[str, Any]) -> str:
        """Render the compiled template with *context*."""
        return self.template.render(context)


def declared_name(source: str) -> str | None:
    """Return the tag name declared by the root element of *source*.

    Returns ``None`` when the source has no root element or the root is
    not closed at the end of the file.
    """
    noise = _LEADING_NOISE_RE.match(source)
    body = source[noise.end() if noise else 0 :]
    match = _ROOT_OPEN_RE.match(body)
    if match is None:
        return None
    name = match.group(1)
    if not body.rstrip().endswith(f"</{name}>"):
        return None
    return name


class TagCompiler:
    """Compiles tag sources into ``TagUnit`` objects.

    Usage::

        compiler = TagCompiler(CompilerOptions())
        unit = compiler.compile(source, "tags/todo-list.tag")
        html = unit.render({"state": {...}})
    """

    __slots__ = ("_env", "options")

    def __init__(self, options: CompilerOptions | None = None, *, env: Environment | None = None) -> None:
        self.options = options or CompilerOptions()
        self._env = env or create_tag_environment(self.options)

    @property
    def env(self) -> Environment:
        return self._env

    def compile(self, source: str, path: str | Path) -> TagUnit:
        """Compile *source* read from *path*.

        Raises:
            CompileError: The source has no root element or kida rejected it.
        """
        name = declared_name(source)
        if name is None:
            msg = "tag source must be a single root element, e.g. <my-tag>...</my-tag>"
            raise CompileError(path, msg)

        try:
            template = self._env.from_string(source)
        except Exception as exc:
            raise CompileError(path, _diagnostic(exc)) from exc

        return TagUnit(name=name, template=template, source_path=str(path), source=source)

    def compile_file(self, path: str | Path) -> TagUnit:
        """Read *path* and compile it.

        An unreadable file is reported as ``CompileError`` so callers
        handle one failure type per source file.
        """
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CompileError(path, str(exc)) from exc
        return self.compile(source, path)


def create_tag_environment(options: CompilerOptions) -> Environment:
    """Create the kida Environment tags compile against."""
    loader = None
    if options.resolve_imports and options.search_paths:
        loader = ChoiceLoader([FileSystemLoader(str(p)) for p in options.search_paths])
    return Environment(
        loader=loader,
        autoescape=options.autoescape,
        trim_blocks=options.trim_blocks,
        lstrip_blocks=options.lstrip_blocks,
    )


def _diagnostic(exc: Exception) -> str:
    """Best human-readable message for a template engine error."""
    format_compact = getattr(exc, "format_compact", None)
    if callable(format_compact):
        return str(format_compact())
    return f"{type(exc).__name__}: {exc}"
