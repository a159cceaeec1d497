"""Tests for the frozen Request built from an ASGI scope."""

from warble.http.request import Request


def _make_scope(**overrides: object) -> dict[str, object]:
    base: dict[str, object] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": [],
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    return base


def _make_receive(*bodies: bytes):
    messages = [
        {"type": "http.request", "body": body, "more_body": i < len(bodies) - 1}
        for i, body in enumerate(bodies)
    ] or [{"type": "http.request", "body": b"", "more_body": False}]
    it = iter(messages)

    async def receive():
        return next(it)

    return receive


class TestFromASGI:
    def test_basic_fields(self) -> None:
        req = Request.from_asgi(_make_scope(method="POST", path="/todos"), _make_receive())
        assert req.method == "POST"
        assert req.path == "/todos"
        assert req.client == ("127.0.0.1", 54321)
        assert req.path_params == {}

    def test_query(self) -> None:
        req = Request.from_asgi(_make_scope(query_string=b"h=abc&h=def&flag="), _make_receive())
        assert req.query_param("h") == "abc"
        assert req.query_param("flag") == ""
        assert req.query_param("missing", "x") == "x"
        assert req.url == "/?h=abc&h=def&flag="

    def test_headers_case_insensitive(self) -> None:
        scope = _make_scope(headers=[(b"content-type", b"application/json")])
        req = Request.from_asgi(scope, _make_receive())
        assert req.content_type == "application/json"
        assert req.headers["Content-Type"] == "application/json"


class TestBody:
    async def test_chunks_joined_and_cached(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"ab", b"cd"))
        assert await req.body() == b"abcd"
        assert await req.body() == b"abcd"

    async def test_json(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b'{"type": "add"}'))
        assert await req.json() == {"type": "add"}
