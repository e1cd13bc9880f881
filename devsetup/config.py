"""devsetup configuration.

Typed configuration for a setup run.  Everything has a sensible default so the
command works with no arguments from inside the target directory; the CLI and
``DEVSETUP_*`` environment variables can override individual fields.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from devsetup.models import ToolRequirement


def _default_runtime() -> ToolRequirement:
    return ToolRequirement(name="node", min_major=18)


def _default_manager() -> ToolRequirement:
    return ToolRequirement(
        name="pnpm",
        install_fallbacks=(
            "npm install -g pnpm",
            "corepack enable && corepack prepare pnpm@latest --activate",
        ),
    )


class SetupConfig(BaseModel):
    """Settings for one run of the setup procedure.

    Instances are created once by the CLI entry point and then passed to
    :class:`~devsetup.pipeline.SetupPipeline`.
    """

    target_dir: Path = Field(default_factory=Path.cwd)
    template_dir: Path | None = Field(
        default=None,
        description="Where pre-authored templates are looked up (defaults to target_dir)",
    )
    runtime: ToolRequirement = Field(default_factory=_default_runtime)
    manager: ToolRequirement = Field(default_factory=_default_manager)
    alternate_manager: str = Field(
        default="npm", description="Manager used when the preferred one cannot be installed"
    )
    hook_manager: str = Field(default="lefthook")
    hook_package: str = Field(default="@evilmartians/lefthook")
    lint_package: str = Field(default="@biomejs/biome")
    lint_config_file: str = Field(default="biome.json")
    test_dependencies: tuple[str, ...] = Field(
        default=("jest", "@types/jest", "ts-jest", "@testing-library/react", "@testing-library/jest-dom")
    )
    command_timeout: float | None = Field(
        default=None, description="Seconds before an external command is killed; None waits"
    )
    default_port: int = Field(default=3000, ge=1, le=65535)

    @property
    def package_manager(self) -> str:
        """Name of the preferred package manager."""
        return self.manager.name

    @property
    def templates_root(self) -> Path:
        """Directory that holds ``*.example`` templates."""
        return self.template_dir or self.target_dir

    @classmethod
    def from_env(cls, **overrides: Any) -> "SetupConfig":
        """Build a ``SetupConfig`` from environment variables.

        Recognised variables (all optional):
            DEVSETUP_TARGET_DIR, DEVSETUP_TEMPLATE_DIR,
            DEVSETUP_MIN_NODE_MAJOR, DEVSETUP_PACKAGE_MANAGER.

        Keyword *overrides* win over the environment.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
                (for example a non-integer ``DEVSETUP_MIN_NODE_MAJOR``).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("DEVSETUP_TARGET_DIR"):
            kwargs["target_dir"] = Path(os.environ["DEVSETUP_TARGET_DIR"])
        if os.environ.get("DEVSETUP_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["DEVSETUP_TEMPLATE_DIR"])
        if os.environ.get("DEVSETUP_MIN_NODE_MAJOR"):
            kwargs["runtime"] = ToolRequirement(
                name="node", min_major=os.environ["DEVSETUP_MIN_NODE_MAJOR"]
            )
        if os.environ.get("DEVSETUP_PACKAGE_MANAGER"):
            name = os.environ["DEVSETUP_PACKAGE_MANAGER"]
            default = _default_manager()
            fallbacks = default.install_fallbacks if name == default.name else ()
            kwargs["manager"] = ToolRequirement(name=name, install_fallbacks=fallbacks)

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
