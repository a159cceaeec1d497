"""Tests for static file serving middleware."""

import pytest

from warble.app import App
from warble.config import AppConfig
from warble.middleware.static import IMMUTABLE_CACHE_CONTROL, StaticFiles
from warble.testing import TestClient


@pytest.fixture
def static_dir(tmp_path):
    static = tmp_path / "static"
    (static / "css").mkdir(parents=True)
    (static / "css" / "main.css").write_text("h1 { font-size: 2em; }")
    (static / "app.js").write_text("console.log('hello');")
    (static / "data.bin").write_bytes(b"\x00\x01\x02\x03")
    (tmp_path / "secret.txt").write_text("top secret")
    return static


def make_app(static_dir, prefix: str = "/") -> App:
    app = App(AppConfig(static_dir=None, tag_dirs=()))
    app.add_middleware(StaticFiles(directory=static_dir, prefix=prefix))

    @app.route("/")
    def index():
        return "home"

    return app


class TestStaticFileServing:
    async def test_serves_file_at_root(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            response = await client.get("/css/main.css")
        assert response.status == 200
        assert "text/css" in response.content_type
        assert "font-size" in response.text

    async def test_serves_binary(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            response = await client.get("/data.bin")
        assert response.body == b"\x00\x01\x02\x03"

    async def test_routes_still_reachable(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            assert (await client.get("/")).text == "home"

    async def test_file_takes_precedence_over_route(self, static_dir) -> None:
        app = make_app(static_dir)

        @app.route("/app.js")
        def script():
            return "from route"

        async with TestClient(app) as client:
            response = await client.get("/app.js")
        assert response.text == "console.log('hello');"

    async def test_missing_file_falls_through(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            assert (await client.get("/nope.css")).status == 404

    async def test_prefix(self, static_dir) -> None:
        async with TestClient(make_app(static_dir, prefix="/static")) as client:
            assert (await client.get("/static/app.js")).status == 200
            assert (await client.get("/app.js")).status == 404

    async def test_post_falls_through(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            assert (await client.post("/app.js")).status == 404

    async def test_traversal_blocked(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            response = await client.get("/../secret.txt")
        assert response.status in (403, 404)
        assert "top secret" not in response.text


class TestCacheControl:
    async def test_fingerprinted_url_is_immutable(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            response = await client.get("/app.js?h=0123456789abcdef0123456789abcdef")
        assert response.header("cache-control") == IMMUTABLE_CACHE_CONTROL

    async def test_plain_url_revalidates(self, static_dir) -> None:
        async with TestClient(make_app(static_dir)) as client:
            response = await client.get("/app.js")
        assert response.header("cache-control") == "no-cache"


class TestAppIntegration:
    async def test_config_static_dir_served(self, static_dir, monkeypatch) -> None:
        monkeypatch.chdir(static_dir.parent)
        app = App(AppConfig(tag_dirs=()))
        async with TestClient(app) as client:
            response = await client.get("/app.js")
        assert response.status == 200
