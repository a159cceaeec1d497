"""Tests for the request-scoped state container."""

import pytest

from warble.state.store import (
    INIT_ACTION_TYPE,
    apply_middleware,
    combine_reducers,
    compose,
    create_store,
    thunk,
)


def counter(state, action):
    if state is None:
        state = {"count": 0}
    if action["type"] == "increment":
        return {"count": state["count"] + action.get("by", 1)}
    return state


class TestStore:
    def test_initial_state_from_reducer(self) -> None:
        assert create_store(counter).get_state() == {"count": 0}

    def test_explicit_initial_state(self) -> None:
        store = create_store(counter, initial_state={"count": 5})
        assert store.get_state() == {"count": 5}

    def test_dispatch_reduces(self) -> None:
        store = create_store(counter)
        store.dispatch({"type": "increment", "by": 2})
        store.dispatch({"type": "increment"})
        assert store.get_state() == {"count": 3}

    def test_dispatch_returns_action(self) -> None:
        action = {"type": "increment"}
        assert create_store(counter).dispatch(action) is action

    def test_action_without_type_rejected(self) -> None:
        with pytest.raises(TypeError, match="type"):
            create_store(counter).dispatch({"by": 1})

    def test_function_rejected_without_thunk(self) -> None:
        with pytest.raises(TypeError, match="thunk"):
            create_store(counter).dispatch(lambda dispatch, get_state: None)

    def test_reducer_may_not_dispatch(self) -> None:
        holder = {}

        def reducer(state, action):
            if action["type"] == "nested":
                holder["store"].dispatch({"type": "other"})
            return state

        store = create_store(reducer)
        holder["store"] = store
        with pytest.raises(RuntimeError):
            store.dispatch({"type": "nested"})

    def test_non_callable_reducer(self) -> None:
        with pytest.raises(TypeError):
            create_store("not a reducer")  # type: ignore[arg-type]

    def test_subscribe_and_unsubscribe(self) -> None:
        store = create_store(counter)
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append(store.get_state()["count"]))

        store.dispatch({"type": "increment"})
        unsubscribe()
        store.dispatch({"type": "increment"})

        assert calls == [1]

    def test_replace_reducer_sends_init(self) -> None:
        seen = []

        def recording(state, action):
            seen.append(action["type"])
            return state

        store = create_store(counter)
        store.replace_reducer(recording)
        assert seen == [INIT_ACTION_TYPE]


class TestMiddleware:
    def test_thunk_receives_dispatch_and_get_state(self) -> None:
        store = create_store(counter, apply_middleware(thunk))

        def add_twice(dispatch, get_state):
            dispatch({"type": "increment"})
            dispatch({"type": "increment"})
            return get_state()["count"]

        assert store.dispatch(add_twice) == 2

    def test_async_thunk_returns_awaitable(self) -> None:
        store = create_store(counter, apply_middleware(thunk))

        async def later(dispatch, get_state):
            dispatch({"type": "increment"})

        result = store.dispatch(later)
        assert hasattr(result, "__await__")
        result.close()

    def test_middleware_order(self) -> None:
        log = []

        def named(label):
            def middleware(store):
                def wrap(next_dispatch):
                    def dispatch(action):
                        log.append(label)
                        return next_dispatch(action)

                    return dispatch

                return wrap

            return middleware

        store = create_store(counter, apply_middleware(named("outer"), named("inner")))
        store.dispatch({"type": "increment"})
        assert log == ["outer", "inner"]

    def test_compose_enhancers(self) -> None:
        applied = []

        def tagging(label):
            def enhancer(factory):
                def create(reducer, *, initial_state=None):
                    applied.append(label)
                    return factory(reducer, initial_state=initial_state)

                return create

            return enhancer

        create_store(counter, compose(tagging("a"), tagging("b")))
        assert applied == ["a", "b"]


class TestCombineReducers:
    def test_slices(self) -> None:
        def todos(state, action):
            state = state or []
            if action["type"] == "add":
                return [*state, action["text"]]
            return state

        store = create_store(combine_reducers({"counter": counter, "todos": todos}))
        store.dispatch({"type": "add", "text": "milk"})
        store.dispatch({"type": "increment"})
        assert store.get_state() == {"counter": {"count": 1}, "todos": ["milk"]}
