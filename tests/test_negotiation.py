"""Tests for mapping handler return values to responses."""

import pytest

from warble.errors import ConfigurationError
from warble.http.response import Redirect, Response
from warble.rendering.returns import Tag
from warble.server.negotiation import negotiate


class TestPassThrough:
    async def test_response(self) -> None:
        response = Response(body="x", status=201)
        assert await negotiate(response) is response

    async def test_redirect(self) -> None:
        response = await negotiate(Redirect("/login"))
        assert response.status == 302
        assert response.header("Location") == "/login"


class TestBodies:
    async def test_str_is_html(self) -> None:
        response = await negotiate("<p>hi</p>")
        assert response.status == 200
        assert response.content_type.startswith("text/html")

    async def test_bytes(self) -> None:
        response = await negotiate(b"\x00")
        assert response.content_type == "application/octet-stream"

    async def test_dict_is_json(self) -> None:
        response = await negotiate({"ok": True})
        assert response.text == '{"ok": true}'
        assert response.content_type.startswith("application/json")

    async def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert"):
            await negotiate(object())


class TestTuples:
    async def test_status_override(self) -> None:
        response = await negotiate(("created", 201))
        assert response.status == 201
        assert response.text == "created"

    async def test_status_and_headers(self) -> None:
        response = await negotiate(("x", 202, {"X-Job": "7"}))
        assert response.status == 202
        assert response.header("x-job") == "7"


class TestTag:
    async def test_tag_without_pipeline(self) -> None:
        with pytest.raises(ConfigurationError):
            await negotiate(Tag("home"))

    async def test_tag_uses_pipeline(self) -> None:
        seen = []

        class FakePipeline:
            async def render(self, request):
                seen.append(request)
                return Response(body="page")

        response = await negotiate(Tag("home", {"type": "x"}), pipeline=FakePipeline())
        assert response.text == "page"
        assert seen[0].tag_name == "home"
        assert seen[0].actions == ({"type": "x"},)
