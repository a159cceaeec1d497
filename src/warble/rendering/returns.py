"""The ``Tag`` return type.

Handlers return a ``Tag`` to render a registered tag as a full page::

    @app.route("/")
    def home():
        return Tag("home")

    @app.route("/todos/{list_id:int}")
    def todos(list_id: int):
        return Tag(
            "todo-list",
            {"type": "select_list", "id": list_id},
            load_todos(list_id),
            status=lambda state: 404 if state["list"] is None else 200,
            stylesheets=("/css/todos.css",),
        )

Positional arguments after the name are actions, applied in order.
A single sequence argument or ``actions=`` also works.
"""

from dataclasses import dataclass
from typing import Any

from warble.state.sequencer import normalize_actions


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Per-response page options. ``None`` means "use the app default"."""

    status: Any = None  # int | Callable[[state], int]
    head: Any = None  # str | Callable[[state], str]
    stylesheets: tuple[str, ...] | None = None
    scripts: tuple[str, ...] | None = None
    path_prefix: str | None = None


@dataclass(frozen=True, slots=True)
class RenderRequest:
    """One request to render a tag. Transient; never persisted."""

    tag_name: str
    actions: tuple[Any, ...] = ()
    options: RenderOptions = RenderOptions()


@dataclass(frozen=True, slots=True)
class Tag:
    """Render a registered tag as a full HTML page."""

    name: str
    actions: tuple[Any, ...] = ()
    options: RenderOptions = RenderOptions()

    def __init__(
        self,
        name: str,
        /,
        *actions: Any,
        status: Any = None,
        head: Any = None,
        stylesheets: tuple[str, ...] | list[str] | None = None,
        scripts: tuple[str, ...] | list[str] | None = None,
        path_prefix: str | None = None,
        **kwargs: Any,
    ) -> None:
        if "actions" in kwargs:
            if actions:
                msg = "Pass actions positionally or with actions=, not both."
                raise TypeError(msg)
            actions = normalize_actions(kwargs.pop("actions"))
        elif len(actions) == 1:
            # Tag("name", [a1, a2]) passes the sequence as one argument
            actions = normalize_actions(actions[0])
        if kwargs:
            msg = f"Unexpected Tag() arguments: {', '.join(sorted(kwargs))}"
            raise TypeError(msg)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "actions", tuple(actions))
        object.__setattr__(
            self,
            "options",
            make_options(
                status=status,
                head=head,
                stylesheets=stylesheets,
                scripts=scripts,
                path_prefix=path_prefix,
            ),
        )

    def to_request(self) -> RenderRequest:
        return RenderRequest(tag_name=self.name, actions=self.actions, options=self.options)


def make_options(
    *,
    status: Any = None,
    head: Any = None,
    stylesheets: tuple[str, ...] | list[str] | None = None,
    scripts: tuple[str, ...] | list[str] | None = None,
    path_prefix: str | None = None,
) -> RenderOptions:
    """Build ``RenderOptions``, freezing list arguments into tuples."""
    return RenderOptions(
        status=status,
        head=head,
        stylesheets=tuple(stylesheets) if stylesheets is not None else None,
        scripts=tuple(scripts) if scripts is not None else None,
        path_prefix=path_prefix,
    )
