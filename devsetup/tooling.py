"""Dependency and developer-tooling steps.

Everything here is optional: a missing manifest, a failed install or an
unavailable hook manager is reported as a warning with a suggested manual
command, and the run carries on.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from devsetup.models import SetupContext, StepResult
from devsetup.utils import command_exists, format_command, run_command

JEST_CONFIG_FILES: tuple[str, ...] = ("jest.config.js", "jest.config.ts", "jest.config.mjs")

RECOMMENDED_SCRIPTS: dict[str, str] = {
    "lint": "biome check .",
    "lint:fix": "biome check --write .",
    "format": "biome format --write .",
    "format:check": "biome format --check .",
    "typecheck": "tsc --noEmit",
    "test": "jest",
    "test:ci": "jest --ci --coverage",
    "test:watch": "jest --watch",
}


# ---------------------------------------------------------------------------
# Package-manager command shapes
# ---------------------------------------------------------------------------


def add_dev_command(manager: str, *packages: str) -> list[str]:
    """Command that adds *packages* as dev dependencies."""
    if manager == "npm":
        return ["npm", "install", "--save-dev", *packages]
    return [manager, "add", "-D", *packages]


def exec_command(manager: str, tool: str, *args: str) -> list[str]:
    """Command that runs a locally installed binary through the manager."""
    if manager == "npm":
        return ["npx", tool, *args]
    return [manager, "exec", tool, *args]


def dlx_command(manager: str, package: str, *args: str) -> list[str]:
    """Command that downloads and runs *package* without installing it."""
    if manager == "npm":
        return ["npx", "--yes", package, *args]
    return [manager, "dlx", package, *args]


def read_manifest(path: Path) -> dict[str, Any] | None:
    """Parse ``package.json``; ``None`` if it is unreadable or not an object."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _manager(ctx: SetupContext) -> str:
    return ctx.package_manager or ctx.config.package_manager


async def _run(ctx: SetupContext, cmd: list[str]) -> int:
    returncode, _, _ = await run_command(cmd, cwd=ctx.root, timeout=ctx.config.command_timeout)
    return returncode


# ---------------------------------------------------------------------------
# Step executors
# ---------------------------------------------------------------------------


async def probe_manifest(ctx: SetupContext) -> list[StepResult]:
    """Record whether ``package.json`` exists; later steps are gated on it."""
    if not ctx.manifest_path.is_file():
        ctx.has_manifest = False
        return [
            StepResult.warning("No package.json found. Some features will be limited."),
            StepResult.info(f"Consider running '{_manager(ctx)} init' first for full functionality."),
        ]

    ctx.has_manifest = True
    manifest = read_manifest(ctx.manifest_path)
    if manifest and isinstance(manifest.get("name"), str):
        ctx.project_name = manifest["name"]
    return [StepResult.ok("package.json found")]


async def install_dependencies(ctx: SetupContext) -> list[StepResult]:
    """Install the project's dependencies when a manifest exists."""
    if not ctx.has_manifest:
        return [StepResult.info("Skipping dependency installation (no package.json)")]

    cmd = [_manager(ctx), "install"]
    if await _run(ctx, cmd) == 0:
        return [StepResult.ok("Dependencies installed")]
    return [
        StepResult.warning(
            "Failed to install dependencies.", remedy=format_command(cmd)
        )
    ]


async def setup_hook_manager(ctx: SetupContext) -> list[StepResult]:
    """Make the commit-hook manager available, globally or as a dev dependency."""
    config = ctx.config
    manager = _manager(ctx)

    if command_exists(config.hook_manager):
        ctx.hook_manager_available = True
        return [StepResult.ok(f"{config.hook_manager} is already installed globally")]

    cmd = add_dev_command(manager, config.hook_package)
    if not ctx.has_manifest:
        return [
            StepResult.warning(
                f"Cannot install {config.hook_manager} without package.json.",
                remedy=format_command(cmd),
            )
        ]

    results = [StepResult.info(f"Installing {config.hook_manager} as dev dependency...")]
    if await _run(ctx, cmd) == 0:
        ctx.hook_manager_available = True
        results.append(StepResult.ok(f"{config.hook_manager} installed"))
    else:
        results.append(
            StepResult.warning(
                f"Failed to install {config.hook_manager}.", remedy=format_command(cmd)
            )
        )
    return results


async def install_hooks(ctx: SetupContext) -> list[StepResult]:
    """Register the git hooks described by ``lefthook.yml``."""
    hook = ctx.config.hook_manager
    if not ctx.hook_manager_available:
        return [StepResult.warning(f"Skipping {hook} hook installation ({hook} not available)")]

    if ctx.has_manifest:
        cmd = exec_command(_manager(ctx), hook, "install")
    elif command_exists(hook):
        cmd = [hook, "install"]
    else:
        return [StepResult.warning(f"Skipping {hook} hook installation ({hook} not on PATH)")]

    if await _run(ctx, cmd) == 0:
        return [StepResult.ok(f"{hook} hooks installed")]
    return [
        StepResult.warning(f"Failed to install {hook} hooks.", remedy=format_command(cmd))
    ]


async def init_lint_config(ctx: SetupContext) -> list[StepResult]:
    """Create the Biome configuration by running its initializer.

    Best effort: the initializer is downloaded on demand, so a network failure
    only produces a warning.
    """
    config = ctx.config
    config_path = ctx.root / config.lint_config_file
    if config_path.is_file():
        return [StepResult.skipped(f"{config.lint_config_file} already exists. Skipping...")]

    cmd = dlx_command(_manager(ctx), config.lint_package, "init")
    if not ctx.has_manifest:
        return [
            StepResult.warning(
                "Cannot initialize Biome without package.json.", remedy=format_command(cmd)
            )
        ]

    if await _run(ctx, cmd) != 0:
        return [StepResult.warning("Failed to initialize Biome.", remedy=format_command(cmd))]
    if not config_path.is_file():
        return [
            StepResult.warning(
                f"Biome init completed but {config.lint_config_file} not found"
            )
        ]
    return [StepResult.ok("Biome initialized")]


async def probe_test_config(ctx: SetupContext) -> list[StepResult]:
    """Report whether a Jest configuration file is present."""
    if any((ctx.root / name).is_file() for name in JEST_CONFIG_FILES):
        return [StepResult.info("Jest configuration found")]

    results = [StepResult.warning("Jest configuration not found.")]
    if ctx.has_manifest:
        cmd = add_dev_command(_manager(ctx), *ctx.config.test_dependencies)
        results.append(StepResult.info(f"Install Jest with: {format_command(cmd)}"))
    return results


async def probe_manifest_scripts(ctx: SetupContext) -> list[StepResult]:
    """Suggest the standard scripts when ``package.json`` has none."""
    if not ctx.has_manifest:
        return []

    manifest = read_manifest(ctx.manifest_path)
    if manifest is None:
        return [StepResult.warning("package.json could not be parsed; scripts not checked.")]
    if isinstance(manifest.get("scripts"), dict):
        return [StepResult.ok("package.json scripts section exists")]

    block = json.dumps({"scripts": RECOMMENDED_SCRIPTS}, indent=2)
    return [
        StepResult.warning("No scripts section in package.json."),
        StepResult.info(f"Recommended scripts to add:\n{block}"),
    ]
