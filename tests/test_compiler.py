"""Tests for tag compilation."""

import pytest

from warble.errors import CompileError
from warble.tags.compiler import CompilerOptions, TagCompiler, declared_name


class TestDeclaredName:
    def test_root_element(self) -> None:
        assert declared_name("<todo-list><p>hi</p></todo-list>") == "todo-list"

    def test_root_with_attributes(self) -> None:
        assert declared_name('<app-shell class="x">\n</app-shell>\n') == "app-shell"

    def test_leading_comments_skipped(self) -> None:
        source = "<!-- header -->\n{# kida note #}\n<hello-page>hi</hello-page>"
        assert declared_name(source) == "hello-page"

    def test_no_root_element(self) -> None:
        assert declared_name("just text") is None

    def test_unclosed_root(self) -> None:
        assert declared_name("<my-tag><p>hi</p>") is None

    def test_trailing_sibling_is_rejected(self) -> None:
        assert declared_name("<a-tag></a-tag><b-tag></b-tag>") is None


class TestTagCompiler:
    def test_compile_renders(self) -> None:
        unit = TagCompiler().compile('<greet-me><p>Hello {{ state["name"] }}</p></greet-me>', "greet.tag")
        assert unit.name == "greet-me"
        assert unit.source_path == "greet.tag"
        assert "Hello Ada" in unit.render({"state": {"name": "Ada"}})

    def test_autoescape_on_by_default(self) -> None:
        unit = TagCompiler().compile("<x-tag>{{ value }}</x-tag>", "x.tag")
        assert "&lt;b&gt;" in unit.render({"value": "<b>"})

    def test_autoescape_can_be_disabled(self) -> None:
        compiler = TagCompiler(CompilerOptions(autoescape=False))
        unit = compiler.compile("<x-tag>{{ value }}</x-tag>", "x.tag")
        assert "<b>" in unit.render({"value": "<b>"})

    def test_missing_root_is_compile_error(self) -> None:
        with pytest.raises(CompileError) as exc_info:
            TagCompiler().compile("<p>one</p><p>two</p>", "bad.tag")
        assert exc_info.value.path == "bad.tag"
        assert "bad.tag" in str(exc_info.value)

    def test_template_syntax_error_is_compile_error(self) -> None:
        with pytest.raises(CompileError) as exc_info:
            TagCompiler().compile("<bad-tag>{% for x in items %}</bad-tag>", "bad.tag")
        assert exc_info.value.__cause__ is not None

    def test_compile_file(self, tmp_path) -> None:
        path = tmp_path / "hello.tag"
        path.write_text("<hello-tag>hi</hello-tag>")
        unit = TagCompiler().compile_file(path)
        assert unit.name == "hello-tag"
        assert unit.source == "<hello-tag>hi</hello-tag>"

    def test_unreadable_file_is_compile_error(self, tmp_path) -> None:
        with pytest.raises(CompileError):
            TagCompiler().compile_file(tmp_path / "missing.tag")

    def test_units_are_immutable(self) -> None:
        unit = TagCompiler().compile("<x-tag></x-tag>", "x.tag")
        with pytest.raises(AttributeError):
            unit.name = "y-tag"  # type: ignore[misc]

    def test_include_unresolved_without_imports(self, tmp_path) -> None:
        (tmp_path / "part.html").write_text("<p>part</p>")
        compiler = TagCompiler(CompilerOptions(search_paths=(tmp_path,)))
        assert compiler.env.loader is None

        source = '<page-tag>{% include "part.html" %}</page-tag>'
        try:
            unit = compiler.compile(source, "page.tag")
        except CompileError:
            return
        with pytest.raises(Exception):  # noqa: B017
            unit.render({})

    def test_include_resolved_from_search_paths(self, tmp_path) -> None:
        (tmp_path / "part.html").write_text("<p>part</p>")
        compiler = TagCompiler(CompilerOptions(resolve_imports=True, search_paths=(tmp_path,)))

        unit = compiler.compile('<page-tag>{% include "part.html" %}</page-tag>', "page.tag")
        assert "<p>part</p>" in unit.render({})
