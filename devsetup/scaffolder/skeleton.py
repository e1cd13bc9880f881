"""Feature-oriented ``src/`` directory skeleton.

The whole tree is created only when ``src/`` does not exist yet; an existing
``src/`` is left alone entirely.  Directories that cannot be created are
reported as failures but already-created siblings are kept.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from devsetup.models import StepResult

SOURCE_ROOT = "src"

# Conventional subfolders shared by every feature grouping.
FEATURE_SUBDIRS: tuple[str, ...] = ("components", "hooks", "utils", "types")

EXAMPLE_DOMAIN = "src/domains/example"

SKELETON_DIRS: tuple[str, ...] = (
    "src/domains",
    *(f"src/shared/{name}" for name in FEATURE_SUBDIRS),
    "src/app",
    *(f"{EXAMPLE_DOMAIN}/{name}" for name in (*FEATURE_SUBDIRS, "__tests__")),
)

# Checked after creation to confirm the tree is usable.
REQUIRED_DIRS: tuple[str, ...] = ("src", "src/domains", "src/shared")


class SkeletonBuilder:
    """Builds the ``src/`` tree under *root*."""

    def __init__(self, root: Path, directories: tuple[str, ...] = SKELETON_DIRS) -> None:
        self.root = Path(root)
        self.directories = directories

    async def build(self) -> list[StepResult]:
        source_root = self.root / SOURCE_ROOT
        if source_root.exists():
            return [
                StepResult.skipped(
                    f"{SOURCE_ROOT} directory already exists. Skipping structure creation..."
                )
            ]

        results: list[StepResult] = []
        for relative in self.directories:
            try:
                await asyncio.to_thread(
                    (self.root / relative).mkdir, parents=True, exist_ok=True
                )
            except OSError as exc:
                results.append(StepResult.failure(f"Failed to create directory: {relative} ({exc})"))

        missing = [d for d in REQUIRED_DIRS if not (self.root / d).is_dir()]
        for relative in missing:
            results.append(StepResult.failure(f"Failed to create directory: {relative}"))

        if not results:
            results.append(StepResult.ok("Created domain-driven project structure"))
            results.append(StepResult.info(f"Example domain structure created at: {EXAMPLE_DOMAIN}"))
        return results
