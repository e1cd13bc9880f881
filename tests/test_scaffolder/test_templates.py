"""Tests for the bundled default templates and TemplateRenderer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from jinja2 import UndefinedError

from devsetup.scaffolder.templates import TemplateRenderer, _slugify_filter

pytestmark = pytest.mark.unit


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


class TestBundledTemplates:
    def test_lists_all_defaults(self, renderer: TemplateRenderer):
        assert renderer.list_templates() == [
            "env.example.j2",
            "gitignore.j2",
            "lefthook.yml.j2",
            "tsconfig.json.j2",
        ]

    def test_has_template(self, renderer: TemplateRenderer):
        assert renderer.has_template("gitignore.j2")
        assert not renderer.has_template("missing.j2")

    def test_tsconfig_is_valid_json(self, renderer: TemplateRenderer, template_context):
        data = json.loads(renderer.render("tsconfig.json.j2", template_context))
        assert data["compilerOptions"]["strict"] is True
        assert data["include"][0] == "src"

    def test_lefthook_is_valid_yaml(self, renderer: TemplateRenderer, template_context):
        data = yaml.safe_load(renderer.render("lefthook.yml.j2", template_context))
        assert set(data) == {"pre-commit", "pre-push"}
        assert data["pre-commit"]["commands"]["lint"]["run"] == "pnpm run lint"

    def test_rendered_files_end_with_newline(
        self, renderer: TemplateRenderer, template_context: dict[str, Any]
    ):
        for name in renderer.list_templates():
            assert renderer.render(name, template_context).endswith("\n"), name

    def test_missing_variable_raises(self, renderer: TemplateRenderer):
        with pytest.raises(UndefinedError):
            renderer.render("env.example.j2", {"project_name": "x"})


class TestCustomDirectory:
    def test_renders_from_given_directory(self, tmp_path: Path):
        (tmp_path / "hello.j2").write_text("Hello {{ name | slugify }}\n", encoding="utf-8")
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render("hello.j2", {"name": "Big App"}) == "Hello big-app\n"

    def test_missing_directory_lists_nothing(self, tmp_path: Path):
        assert TemplateRenderer(tmp_path / "absent").list_templates() == []


class TestSlugify:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("My App", "my-app"),
            ("  @scope/pkg  ", "scope-pkg"),
            ("already-slugged", "already-slugged"),
            ("Weird___Name!!", "weird-name"),
        ],
    )
    def test_slugify(self, value: str, expected: str):
        assert _slugify_filter(value) == expected
