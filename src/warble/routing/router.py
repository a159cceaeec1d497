r"""Regex-compiled router.

Each route path compiles to one anchored pattern::

    "/todos/{list_id:int}"  ->  ^/todos/(?P<list_id>\d+)$

Routes are tried static-first, then by registration order, so
``/todos/new`` wins over ``/todos/{name}`` regardless of which was
added first.
"""

import re
from dataclasses import dataclass
from typing import Any

from warble.errors import ConfigurationError, MethodNotAllowed, NotFound
from warble.routing.params import CONVERTERS, convert_param
from warble.routing.route import Route, RouteMatch

_PARAM_RE = re.compile(r"\{([A-Za-z_]\w*)(?::(\w+))?\}")


@dataclass(frozen=True, slots=True)
class _Compiled:
    route: Route
    regex: re.Pattern[str]
    types: dict[str, str]


def compile_path(path: str) -> tuple[re.Pattern[str], dict[str, str]]:
    """Compile a route path into a regex and its parameter types.

    Raises:
        ConfigurationError: Unknown converter or repeated parameter name.
    """
    types: dict[str, str] = {}
    pattern = ["^"]
    position = 0
    normalized = "/" + path.strip("/")
    for match in _PARAM_RE.finditer(normalized):
        name, param_type = match.group(1), match.group(2) or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown path converter {param_type!r} in route {path!r}"
            raise ConfigurationError(msg)
        if name in types:
            msg = f"Duplicate path parameter {name!r} in route {path!r}"
            raise ConfigurationError(msg)
        types[name] = param_type
        pattern.append(re.escape(normalized[position : match.start()]))
        pattern.append(f"(?P<{name}>{CONVERTERS[param_type][0]})")
        position = match.end()
    pattern.append(re.escape(normalized[position:]))
    pattern.append("$")
    return re.compile("".join(pattern)), types


class Router:
    """Route table. Add routes during setup, then ``compile()``.

    Usage::

        router = Router()
        router.add(Route("/todos/{list_id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/todos/42")
        match.path_params  # {"list_id": 42}
    """

    __slots__ = ("_compiled", "_entries", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._entries: tuple[_Compiled, ...] = ()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        self._routes.append(route)

    @property
    def routes(self) -> list[Route]:
        return list(self._routes)

    def compile(self) -> None:
        """Compile every route and freeze the table."""
        entries = []
        for route in self._routes:
            regex, types = compile_path(route.path)
            entries.append(_Compiled(route, regex, types))
        # Stable sort: static routes first, registration order otherwise
        entries.sort(key=lambda entry: bool(entry.types))
        self._entries = tuple(entries)
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match *method* and *path* against the compiled routes.

        Raises:
            NotFound: No route matches the path.
            MethodNotAllowed: Routes match the path, but not the method.
        """
        normalized = "/" + path.strip("/")
        allowed: set[str] = set()
        for entry in self._entries:
            found = entry.regex.match(normalized)
            if found is None:
                continue
            if method in entry.route.methods or (
                method == "HEAD" and "GET" in entry.route.methods
            ):
                return RouteMatch(route=entry.route, path_params=_convert(found, entry.types))
            allowed |= entry.route.methods

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")


def _convert(found: re.Match[str], types: dict[str, str]) -> dict[str, Any]:
    return {name: convert_param(value, types[name]) for name, value in found.groupdict().items()}
