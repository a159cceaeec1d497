"""Warble — server-rendered tags with per-request state.

Each request gets a fresh store. Its actions are applied in order while
the page's assets are fingerprinted, then a registered tag renders the
final state into a full HTML page.

Basic usage::

    from warble import App, AppConfig, Tag

    def reducer(state, action):
        if action["type"] == "greet":
            return {**state, "name": action["name"]}
        return state or {"name": "world"}

    app = App(AppConfig(debug=True), reducer=reducer)

    @app.route("/hello/{name}")
    def hello(name: str):
        return Tag("hello-page", {"type": "greet", "name": name})

    app.run()
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Computed",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "Tag",
    "Value",
    "WarbleError",
    "apply_middleware",
    "combine_reducers",
    "create_store",
    "thunk",
]

_LAZY = {
    "App": "warble.app",
    "AppConfig": "warble.config",
    "Request": "warble.http.request",
    "Response": "warble.http.response",
    "Redirect": "warble.http.response",
    "Tag": "warble.rendering.returns",
    "Value": "warble.rendering.options",
    "Computed": "warble.rendering.options",
    "Middleware": "warble.middleware.protocol",
    "Next": "warble.middleware.protocol",
    "WarbleError": "warble.errors",
    "ConfigurationError": "warble.errors",
    "HTTPError": "warble.errors",
    "NotFound": "warble.errors",
    "MethodNotAllowed": "warble.errors",
    "apply_middleware": "warble.state.store",
    "combine_reducers": "warble.state.store",
    "create_store": "warble.state.store",
    "thunk": "warble.state.store",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` fast while providing a clean top-level API.
    """
    module_name = _LAZY.get(name)
    if module_name is None:
        msg = f"module 'warble' has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
