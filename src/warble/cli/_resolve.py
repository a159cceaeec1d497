"""App import resolution — resolves ``"module:attribute"`` strings to App instances."""

import importlib

from warble.app import App


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a warble App instance.

    Accepts ``"module:attribute"``; the attribute defaults to ``app``.
    A callable that is not an App is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a warble ``App``.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "app")

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a warble.App instance"
        raise TypeError(msg)

    return obj
