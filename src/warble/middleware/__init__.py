"""Middleware protocol and built-in middleware."""

from warble.middleware.protocol import Middleware, Next
from warble.middleware.static import StaticFiles

__all__ = ["Middleware", "Next", "StaticFiles"]
