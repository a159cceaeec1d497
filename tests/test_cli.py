"""Tests for the warble CLI."""

import sys
import types

import pytest

from warble.cli import main
from warble.cli._resolve import resolve_app


@pytest.fixture
def _fake_app_module(monkeypatch: pytest.MonkeyPatch) -> None:
    """Register a fake module with a warble App on sys.modules."""
    from warble.app import App

    mod = types.ModuleType("_fake_warble_app")
    mod.app = App()  # type: ignore[attr-defined]
    mod.create_app = App  # type: ignore[attr-defined]
    mod.not_an_app = "just a string"  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "_fake_warble_app", mod)


@pytest.mark.usefixtures("_fake_app_module")
class TestResolveApp:
    def test_default_attribute(self) -> None:
        from warble.app import App

        assert isinstance(resolve_app("_fake_warble_app"), App)

    def test_factory(self) -> None:
        from warble.app import App

        assert isinstance(resolve_app("_fake_warble_app:create_app"), App)

    def test_not_an_app(self) -> None:
        with pytest.raises(TypeError):
            resolve_app("_fake_warble_app:not_an_app")

    def test_missing_module(self) -> None:
        with pytest.raises(ModuleNotFoundError):
            resolve_app("nonexistent_module_xyz:app")


class TestMain:
    def test_no_command_prints_help(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "warble" in capsys.readouterr().out


class TestTagsCommand:
    def test_lists_compiled_tags(self, tmp_path, capsys) -> None:
        (tmp_path / "a.tag").write_text("<a-tag>a</a-tag>")
        (tmp_path / "b.tag").write_text("<b-tag>b</b-tag>")

        main(["tags", str(tmp_path)])

        out = capsys.readouterr().out
        assert "a-tag" in out
        assert "b-tag" in out
        assert "2 tag(s) compiled" in out

    def test_compile_error_exits_1(self, tmp_path, capsys) -> None:
        (tmp_path / "bad.tag").write_text("nope")
        with pytest.raises(SystemExit) as exc_info:
            main(["tags", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "bad.tag" in capsys.readouterr().err

    def test_missing_directory_exits_1(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["tags", str(tmp_path / "missing")])
        assert exc_info.value.code == 1

    def test_custom_pattern(self, tmp_path, capsys) -> None:
        (tmp_path / "a.riot").write_text("<a-tag>a</a-tag>")
        main(["tags", str(tmp_path), "--pattern", "*.riot"])
        assert "1 tag(s) compiled" in capsys.readouterr().out


class TestRunCommand:
    def test_bad_import_exits_1(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "nonexistent_module_xyz:app"])
        assert exc_info.value.code == 1
        assert "Error" in capsys.readouterr().err

    @pytest.mark.usefixtures("_fake_app_module")
    def test_starts_dev_server(self, monkeypatch, tmp_path) -> None:
        calls = {}

        def fake_run(app, host, port, **kwargs):
            calls.update(host=host, port=port, **kwargs)

        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("warble.server.dev.run_dev_server", fake_run)
        main(["run", "_fake_warble_app:app", "--port", "9000"])

        assert calls["port"] == 9000
        assert calls["host"] == "127.0.0.1"
        assert calls["app_path"] == "_fake_warble_app:app"
