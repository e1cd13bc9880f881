"""Tests for the src/ directory skeleton.

Covers:
- Full tree creation in an empty directory
- Existing src/ left untouched
- Partial failure keeps already-created directories
"""

from __future__ import annotations

from pathlib import Path

import pytest

from devsetup.models import ResultStatus
from devsetup.scaffolder.skeleton import (
    EXAMPLE_DOMAIN,
    FEATURE_SUBDIRS,
    SKELETON_DIRS,
    SkeletonBuilder,
)

pytestmark = pytest.mark.unit


class TestSkeletonLayout:
    def test_shared_and_example_subdirs(self):
        for name in FEATURE_SUBDIRS:
            assert f"src/shared/{name}" in SKELETON_DIRS
            assert f"{EXAMPLE_DOMAIN}/{name}" in SKELETON_DIRS
        assert f"{EXAMPLE_DOMAIN}/__tests__" in SKELETON_DIRS
        assert "src/app" in SKELETON_DIRS


class TestSkeletonBuilder:
    async def test_builds_full_tree(self, project_dir: Path):
        results = await SkeletonBuilder(project_dir).build()

        assert [r.status for r in results] == [ResultStatus.OK, ResultStatus.INFO]
        for relative in SKELETON_DIRS:
            assert (project_dir / relative).is_dir(), relative
        assert EXAMPLE_DOMAIN in results[1].message

    async def test_existing_src_untouched(self, project_dir: Path):
        (project_dir / "src").mkdir()
        (project_dir / "src" / "index.ts").write_text("export {};\n", encoding="utf-8")

        results = await SkeletonBuilder(project_dir).build()

        assert [r.status for r in results] == [ResultStatus.SKIPPED]
        assert sorted(p.name for p in (project_dir / "src").iterdir()) == ["index.ts"]

    async def test_failed_directory_reported_without_rollback(
        self, project_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        original_mkdir = Path.mkdir

        def flaky_mkdir(self: Path, *args, **kwargs):
            if self.name == "hooks" and self.parent.name == "shared":
                raise PermissionError("denied")
            return original_mkdir(self, *args, **kwargs)

        monkeypatch.setattr(Path, "mkdir", flaky_mkdir)
        results = await SkeletonBuilder(project_dir).build()

        failures = [r for r in results if r.is_failure]
        assert len(failures) == 1
        assert "src/shared/hooks" in failures[0].message
        assert (project_dir / "src" / "shared" / "components").is_dir()
        assert (project_dir / "src" / "app").is_dir()
        assert not any(r.status is ResultStatus.OK for r in results)

    async def test_missing_required_directory_fails(self, project_dir: Path):
        results = await SkeletonBuilder(project_dir, directories=("src/app",)).build()
        messages = [r.message for r in results if r.is_failure]
        assert messages == [
            "Failed to create directory: src/domains",
            "Failed to create directory: src/shared",
        ]
