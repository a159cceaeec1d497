"""Per-response options that may depend on the final state.

A page's HTTP status or extra ``<head>`` markup is either fixed up front
or computed from the snapshot once every action has been applied::

    Tag("article", load_article(slug),
        status=lambda state: 404 if state["article"] is None else 200)

Both forms are normalized to a small tagged union and resolved
explicitly at render time.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Value[T]:
    """An option fixed before rendering."""

    value: T

    def resolve(self, state: Any) -> T:  # noqa: ARG002
        return self.value


@dataclass(frozen=True, slots=True)
class Computed[T]:
    """An option computed from the state snapshot."""

    func: Callable[[Any], T]

    def resolve(self, state: Any) -> T:
        return self.func(state)


type Option[T] = Value[T] | Computed[T]


def as_option(value: Any) -> Value[Any] | Computed[Any]:
    """Wrap a plain value or a function of state as an option."""
    if isinstance(value, (Value, Computed)):
        return value
    if callable(value):
        return Computed(value)
    return Value(value)


def resolve(option: Any, state: Any, default: Any = None) -> Any:
    """Resolve *option* against *state*; ``None`` yields *default*."""
    if option is None:
        return default
    result = as_option(option).resolve(state)
    return default if result is None else result
