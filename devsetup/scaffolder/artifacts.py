"""Idempotent artifact creation.

:class:`ArtifactEngine` ensures that each :class:`~devsetup.models.ArtifactSpec`
exists under the target directory without ever overwriting what is already
there.  A pre-authored template is copied verbatim when available; otherwise a
bundled default is rendered.  Every creation is verified by re-checking the
path afterwards.  Problems are reported as results, never raised, so one
broken artifact cannot stop the others from being created.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Any

from jinja2 import TemplateError

from devsetup.models import ArtifactSpec, StepResult

from .templates import TemplateRenderer


DEFAULT_ARTIFACTS: dict[str, ArtifactSpec] = {
    "hooks": ArtifactSpec(
        name="lefthook.yml",
        target="lefthook.yml",
        template="lefthook.yml.example",
        default_template="lefthook.yml.j2",
    ),
    "workflows_dir": ArtifactSpec(
        name=".github/workflows",
        target=".github/workflows",
        kind="directory",
    ),
    "ci_workflow": ArtifactSpec(
        name="GitHub Actions workflow",
        target=".github/workflows/pr-checks.yml",
        template=".github/workflows/pr-checks.yml.example",
        on_missing="warn",
    ),
    "pr_template": ArtifactSpec(
        name="PR template",
        target=".github/pull_request_template.md",
        template="pull_request_template.md",
        on_missing="warn",
    ),
    "gitignore": ArtifactSpec(
        name=".gitignore",
        target=".gitignore",
        template=".gitignore.example",
        default_template="gitignore.j2",
    ),
    "env_example": ArtifactSpec(
        name=".env.example",
        target=".env.example",
        default_template="env.example.j2",
    ),
    "tsconfig": ArtifactSpec(
        name="tsconfig.json",
        target="tsconfig.json",
        default_template="tsconfig.json.j2",
    ),
    "compose": ArtifactSpec(
        name="docker-compose.yml",
        target="docker-compose.yml",
        template="docker-compose.yml.example",
        on_missing="skip",
    ),
}


class ArtifactEngine:
    """Creates files and directories that do not exist yet.

    Args:
        root: Target directory that artifact paths are relative to.
        templates_root: Directory searched for pre-authored templates.
        renderer: Renderer for bundled default contents.
    """

    def __init__(
        self,
        root: Path,
        templates_root: Path | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.root = Path(root)
        self.templates_root = Path(templates_root) if templates_root else self.root
        self.renderer = renderer or TemplateRenderer()

    def target_path(self, spec: ArtifactSpec) -> Path:
        return self.root / spec.target

    def template_path(self, spec: ArtifactSpec) -> Path | None:
        if spec.template is None:
            return None
        return self.templates_root / spec.template

    def exists(self, spec: ArtifactSpec) -> bool:
        target = self.target_path(spec)
        # A symlink, dangling or not, counts as present and is never written through.
        if target.is_symlink():
            return True
        if spec.kind == "directory":
            return target.is_dir()
        return target.is_file()

    async def ensure(
        self, spec: ArtifactSpec, context: dict[str, Any] | None = None
    ) -> StepResult:
        """Make sure *spec* exists, creating it if necessary.

        Returns a single result: ``skipped`` when the artifact was already
        present, ``ok`` when it was created and verified, ``warning``/``info``
        when no source was available, or ``failure`` when it could not be
        materialized.
        """
        if self.exists(spec):
            return StepResult.skipped(f"{spec.name} already exists. Skipping...")

        if spec.kind == "directory":
            return await self._ensure_directory(spec)
        return await self._ensure_file(spec, context or {})

    async def ensure_all(
        self, specs: list[ArtifactSpec], context: dict[str, Any] | None = None
    ) -> list[StepResult]:
        return [await self.ensure(spec, context) for spec in specs]

    # -- Internal ----------------------------------------------------------

    async def _ensure_directory(self, spec: ArtifactSpec) -> StepResult:
        target = self.target_path(spec)
        try:
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            return StepResult.failure(f"Failed to create directory: {spec.target} ({exc})")
        return self._verify(spec, f"Created {spec.name}")

    async def _ensure_file(self, spec: ArtifactSpec, context: dict[str, Any]) -> StepResult:
        target = self.target_path(spec)
        template = self.template_path(spec)

        if template is not None and template.is_file():
            try:
                await asyncio.to_thread(_copy_file, template, target)
            except OSError as exc:
                return StepResult.failure(f"Failed to copy {spec.template} ({exc})")
            return self._verify(spec, f"Created {spec.name} from template")

        default = spec.default_template
        if default is not None and self.renderer.has_template(default):
            try:
                content = self.renderer.render(default, context)
                await asyncio.to_thread(_write_file, target, content)
            except (OSError, TemplateError) as exc:
                return StepResult.failure(f"Failed to write {spec.target} ({exc})")
            return self._verify(spec, f"Created default {spec.name}")

        source = spec.template or spec.target
        if spec.on_missing == "skip":
            return StepResult.info(f"{spec.name} skipped (no template found at {source})")
        return StepResult.warning(f"{spec.name} template not found ({source}). Skipping...")

    def _verify(self, spec: ArtifactSpec, success_message: str) -> StepResult:
        if self.exists(spec):
            return StepResult.ok(success_message)
        kind = "directory" if spec.kind == "directory" else "file"
        return StepResult.failure(f"Failed to create {kind}: {spec.target}")


def _copy_file(source: Path, target: Path) -> None:
    """Copy *source* to *target* byte for byte, creating parent directories."""
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)


def _write_file(path: Path, content: str) -> None:
    """Create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
