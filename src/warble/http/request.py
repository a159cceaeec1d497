"""Immutable HTTP request.

Frozen metadata with async body access.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from warble._internal.asgi import Receive, Scope
from warble.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, query) is frozen at creation.
    The body is read asynchronously via ``.body()``, ``.json()``, ``.text()``.
    """

    method: str
    path: str
    headers: Headers
    query: Mapping[str, list[str]]
    query_string: str
    path_params: dict[str, Any]
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: body cache (the dict is mutable, the field reference is not)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    def query_param(self, key: str, default: str | None = None) -> str | None:
        """First value of query parameter *key*."""
        values = self.query.get(key)
        return values[0] if values else default

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first read."""
        if "_body" in self._cache:
            return self._cache["_body"]
        result = b"".join([chunk async for chunk in self.stream()])
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Scope,
        receive: Receive,
        path_params: dict[str, Any] | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        query_string = scope.get("query_string", b"").decode("latin-1")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query=parse_qs(query_string, keep_blank_values=True),
            query_string=query_string,
            path_params=path_params or {},
            client=tuple(client) if client else None,
            _receive=receive,
        )
