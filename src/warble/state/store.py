"""Request-scoped state container with reducer semantics.

A ``Store`` holds one state value. ``dispatch(action)`` replaces it with
``reducer(state, action)`` and notifies subscribers. The render pipeline
creates a fresh store per request, so stores are never shared between
requests.

Enhancers wrap store creation, and middleware wraps ``dispatch``::

    def logger(store):
        def wrap(next):
            def dispatch(action):
                log.debug("dispatch %s", action)
                return next(action)
            return dispatch
        return wrap

    store = create_store(reducer, apply_middleware(thunk, logger))

With ``thunk`` installed, a callable action is invoked with
``(dispatch, get_state)`` instead of reaching the reducer. An ``async``
thunk makes ``dispatch`` return a coroutine, which is how actions that
load data are expressed.
"""

from collections.abc import Callable, Mapping
from typing import Any

# Reducer: (state, action) -> new state
type Reducer = Callable[[Any, Any], Any]
type Dispatch = Callable[[Any], Any]
type Listener = Callable[[], None]
type StoreFactory = Callable[..., Store]
type Enhancer = Callable[[StoreFactory], StoreFactory]

INIT_ACTION_TYPE = "@@warble/INIT"


class Store:
    """A state container. Create through ``create_store()``."""

    __slots__ = ("_dispatching", "_listeners", "_reducer", "_state", "dispatch")

    def __init__(self, reducer: Reducer, initial_state: Any = None) -> None:
        if not callable(reducer):
            msg = f"Reducer must be callable, got {type(reducer).__name__}"
            raise TypeError(msg)
        self._reducer = reducer
        self._state = initial_state
        self._listeners: list[Listener] = []
        self._dispatching = False
        # Instance attribute so middleware can replace it
        self.dispatch: Dispatch = self._dispatch

    def get_state(self) -> Any:
        """Return the current state."""
        return self._state

    def _dispatch(self, action: Any) -> Any:
        if not isinstance(action, Mapping):
            msg = (
                f"Actions must be mappings with a 'type' key, got {type(action).__name__}. "
                "Install the thunk middleware to dispatch functions."
            )
            raise TypeError(msg)
        if "type" not in action:
            msg = f"Action is missing a 'type' key: {action!r}"
            raise TypeError(msg)
        if self._dispatching:
            msg = "Reducers may not dispatch actions."
            raise RuntimeError(msg)

        self._dispatching = True
        try:
            self._state = self._reducer(self._state, action)
        finally:
            self._dispatching = False

        for listener in list(self._listeners):
            listener()
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every dispatch. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_reducer(self, reducer: Reducer) -> None:
        """Swap the reducer and re-initialise derived state."""
        self._reducer = reducer
        self._dispatch({"type": INIT_ACTION_TYPE})


def create_store(
    reducer: Reducer,
    enhancer: Enhancer | None = None,
    *,
    initial_state: Any = None,
) -> Store:
    """Create a store, applying *enhancer* if given.

    The reducer is called once with an init action so it can supply its
    default state.
    """
    if enhancer is not None:
        if not callable(enhancer):
            msg = f"Enhancer must be callable, got {type(enhancer).__name__}"
            raise TypeError(msg)
        return enhancer(_create_plain_store)(reducer, initial_state=initial_state)
    return _create_plain_store(reducer, initial_state=initial_state)


def _create_plain_store(reducer: Reducer, *, initial_state: Any = None) -> Store:
    store = Store(reducer, initial_state)
    store._dispatch({"type": INIT_ACTION_TYPE})
    return store


def apply_middleware(*middlewares: Callable[[Store], Callable[[Dispatch], Dispatch]]) -> Enhancer:
    """Build an enhancer that threads ``dispatch`` through *middlewares*.

    The first middleware is outermost. Middleware dispatching from inside
    its chain goes through the full chain again.
    """

    def enhancer(factory: StoreFactory) -> StoreFactory:
        def create(reducer: Reducer, *, initial_state: Any = None) -> Store:
            store = factory(reducer, initial_state=initial_state)
            dispatch = store.dispatch
            chain = [mw(store) for mw in middlewares]
            for wrap in reversed(chain):
                dispatch = wrap(dispatch)
            store.dispatch = dispatch
            return store

        return create

    return enhancer


def compose(*enhancers: Enhancer) -> Enhancer:
    """Combine enhancers; the first is applied outermost."""

    def composed(factory: StoreFactory) -> StoreFactory:
        for enhancer in reversed(enhancers):
            factory = enhancer(factory)
        return factory

    return composed


def thunk(store: Store) -> Callable[[Dispatch], Dispatch]:
    """Middleware that lets functions be dispatched.

    ``dispatch(fn)`` calls ``fn(store.dispatch, store.get_state)`` and
    returns its result, awaitable or not.
    """

    def wrap(next_dispatch: Dispatch) -> Dispatch:
        def dispatch(action: Any) -> Any:
            if callable(action) and not isinstance(action, Mapping):
                return action(store.dispatch, store.get_state)
            return next_dispatch(action)

        return dispatch

    return wrap


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer:
    """Build a reducer whose state is a dict with one key per sub-reducer."""
    items = tuple(reducers.items())

    def combined(state: Any, action: Any) -> dict[str, Any]:
        previous = state if isinstance(state, Mapping) else {}
        return {key: reducer(previous.get(key), action) for key, reducer in items}

    return combined
