"""Environment preflight checks.

Run before any artifact is written.  Each check returns tagged results; the
step descriptors in :data:`PREFLIGHT_STEPS` decide which checks abort the run
when they report a failure.  Some checks mutate the environment on purpose
(``git init``, global package-manager installs).
"""

from __future__ import annotations

from pathlib import Path

from devsetup.models import SetupContext, Step, StepResult
from devsetup.utils import (
    append_path_entry,
    command_exists,
    is_writable,
    parse_major_version,
    run_command,
)


async def check_writable(ctx: SetupContext) -> list[StepResult]:
    """Fail when files cannot be created in the target directory."""
    if not ctx.root.is_dir() or not is_writable(ctx.root):
        return [StepResult.failure(f"Target directory is not writable: {ctx.root}")]
    return [StepResult.ok(f"Target directory is writable: {ctx.root}")]


async def check_version_control(ctx: SetupContext) -> list[StepResult]:
    """Initialise a git repository when the target is not one already.

    A failed ``git init`` is only a warning: nothing later in the procedure
    depends on the repository existing.
    """
    if (ctx.root / ".git").exists():
        return [StepResult.ok("Git repository detected")]

    results = [StepResult.warning("Not in a git repository. Initializing git...")]
    returncode, _, _ = await run_command(
        ["git", "init"], cwd=ctx.root, timeout=ctx.config.command_timeout
    )
    if returncode == 0:
        results.append(StepResult.ok("Git repository initialized"))
    else:
        results.append(
            StepResult.warning("Failed to initialize git repository.", remedy="git init")
        )
    return results


async def check_runtime(ctx: SetupContext) -> list[StepResult]:
    """Verify the JavaScript runtime is installed and new enough."""
    runtime = ctx.config.runtime
    minimum = f" {runtime.min_major}+" if runtime.min_major is not None else ""
    if not command_exists(runtime.name):
        return [
            StepResult.failure(
                f"{runtime.name} is not installed. Please install {runtime.name}{minimum} first."
            )
        ]

    returncode, stdout, _ = await run_command(
        [runtime.name, "--version"], cwd=ctx.root, timeout=ctx.config.command_timeout
    )
    version = stdout.strip() if returncode == 0 and stdout.strip() else "unknown"
    ctx.runtime_version = version
    results = [StepResult.ok(f"{runtime.name} found: {version}")]

    if runtime.min_major is None:
        return results

    major = parse_major_version(version)
    if major is None:
        results.append(
            StepResult.warning(
                f"Could not parse {runtime.name} version, continuing anyway..."
            )
        )
    elif major < runtime.min_major:
        results.append(
            StepResult.failure(
                f"{runtime.name} version {runtime.min_major} or higher is required. "
                f"Found: {version}"
            )
        )
    return results


async def check_package_manager(ctx: SetupContext) -> list[StepResult]:
    """Locate the preferred package manager, installing it if needed.

    Fallback installers are tried in order.  When all of them fail the
    alternate manager is used instead; the check only fails when no manager
    at all is available.
    """
    config = ctx.config
    preferred = config.manager.name

    if command_exists(preferred):
        ctx.package_manager = preferred
        version = await _tool_version(preferred, ctx)
        return [StepResult.ok(f"{preferred} found: {version}")]

    results = [StepResult.warning(f"{preferred} not found. Attempting to install {preferred}...")]
    installer = await _install_with_fallbacks(ctx)
    if installer is not None:
        ctx.package_manager = preferred
        results.append(StepResult.ok(f"{preferred} installed via {installer}"))
        if not command_exists(preferred):
            results.extend(await _expose_global_bin(ctx))
        return results

    fallback_hint = config.manager.install_fallbacks[0] if config.manager.install_fallbacks else None
    if command_exists(config.alternate_manager):
        ctx.package_manager = config.alternate_manager
        results.append(
            StepResult.warning(
                f"Failed to install {preferred}; continuing with {config.alternate_manager}.",
                remedy=fallback_hint,
            )
        )
        return results

    results.append(
        StepResult.failure(
            f"Neither {preferred} nor {config.alternate_manager} is available. Cannot proceed.",
            remedy=fallback_hint,
        )
    )
    return results


async def _install_with_fallbacks(ctx: SetupContext) -> str | None:
    """Try each fallback installer; return the tool that succeeded."""
    for command in ctx.config.manager.install_fallbacks:
        tool = command.split()[0]
        if not command_exists(tool):
            continue
        returncode, _, _ = await run_command(
            command, cwd=ctx.root, timeout=ctx.config.command_timeout
        )
        if returncode == 0:
            return tool
    return None


async def _expose_global_bin(ctx: SetupContext) -> list[StepResult]:
    """Put npm's global ``bin`` directory on ``PATH`` for the rest of the run."""
    preferred = ctx.config.manager.name
    returncode, prefix, _ = await run_command(
        [ctx.config.alternate_manager, "config", "get", "prefix"],
        cwd=ctx.root,
        timeout=ctx.config.command_timeout,
    )
    if returncode != 0 or not prefix.strip():
        return [StepResult.warning(f"{preferred} was installed but is not on PATH.")]
    bin_dir = Path(prefix.strip()) / "bin"
    append_path_entry(bin_dir)
    return [StepResult.warning(f"{preferred} may not be on PATH; added {bin_dir} for this run.")]


async def _tool_version(name: str, ctx: SetupContext) -> str:
    returncode, stdout, _ = await run_command(
        [name, "--version"], cwd=ctx.root, timeout=ctx.config.command_timeout
    )
    return stdout.strip() if returncode == 0 and stdout.strip() else "unknown"


PREFLIGHT_STEPS: list[Step] = [
    Step(
        name="writable",
        description="Checking target directory permissions...",
        executor=check_writable,
        fatal=True,
    ),
    Step(
        name="version-control",
        description="Checking git repository...",
        executor=check_version_control,
    ),
    Step(
        name="runtime",
        description="Checking Node.js installation...",
        executor=check_runtime,
        fatal=True,
    ),
    Step(
        name="package-manager",
        description="Checking package manager installation...",
        executor=check_package_manager,
        fatal=True,
    ),
]
