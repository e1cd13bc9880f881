"""devsetup scaffolder -- materializes project configuration files.

Copies pre-authored ``*.example`` templates into place when they exist and
falls back to bundled Jinja2 defaults otherwise, never touching a file that is
already present.

Quick usage::

    from devsetup.scaffolder import ArtifactEngine, DEFAULT_ARTIFACTS

    engine = ArtifactEngine(Path.cwd())
    result = await engine.ensure(DEFAULT_ARTIFACTS["gitignore"], {"project_name": "app"})
"""

from devsetup.scaffolder.artifacts import DEFAULT_ARTIFACTS, ArtifactEngine
from devsetup.scaffolder.skeleton import SKELETON_DIRS, SkeletonBuilder
from devsetup.scaffolder.templates import TemplateRenderer

__all__ = [
    "DEFAULT_ARTIFACTS",
    "SKELETON_DIRS",
    "ArtifactEngine",
    "SkeletonBuilder",
    "TemplateRenderer",
]
