"""devsetup pipeline driver.

Runs the project setup procedure as an ordered list of :class:`Step`
descriptors:

1. Preflight   -- directory permissions, git, Node.js, package manager.
2. Tooling     -- manifest probe, dependency install, commit-hook manager.
3. Artifacts   -- hook config, CI workflow, PR template, ignore/env/TS config.
4. Lint & test -- Biome initialization, Jest probe.
5. Skeleton    -- feature-oriented ``src/`` tree, docker-compose file.
6. Summary     -- failure/warning counts and the process exit code.

Usage::

    cd my-app && devsetup
    python -m devsetup.pipeline --target ./my-app
"""

from __future__ import annotations

import asyncio
import sys
import traceback
from pathlib import Path

from pydantic import ValidationError
from rich.panel import Panel

from devsetup.config import SetupConfig
from devsetup.models import RunOutcome, RunState, SetupContext, Step, StepExecutor, StepResult
from devsetup.preflight import PREFLIGHT_STEPS
from devsetup.scaffolder import DEFAULT_ARTIFACTS, ArtifactEngine, SkeletonBuilder
from devsetup.tooling import (
    init_lint_config,
    install_dependencies,
    install_hooks,
    probe_manifest,
    probe_manifest_scripts,
    probe_test_config,
    setup_hook_manager,
)
from devsetup.utils import console, print_error, print_header, print_info, print_warning

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class SetupError(Exception):
    """Raised when a step executor fails unexpectedly."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"Step '{step}': {message}")


# ---------------------------------------------------------------------------
# Step list
# ---------------------------------------------------------------------------


def artifact_executor(*keys: str) -> StepExecutor:
    """Build an executor that ensures the named ``DEFAULT_ARTIFACTS`` in order."""
    specs = [DEFAULT_ARTIFACTS[key] for key in keys]

    async def _execute(ctx: SetupContext) -> list[StepResult]:
        engine = ArtifactEngine(ctx.root, ctx.config.templates_root)
        return await engine.ensure_all(specs, ctx.template_context())

    return _execute


async def build_skeleton(ctx: SetupContext) -> list[StepResult]:
    return await SkeletonBuilder(ctx.root).build()


def default_steps() -> list[Step]:
    """The full setup procedure, in execution order."""
    return [
        *PREFLIGHT_STEPS,
        Step("manifest", "Checking package.json...", probe_manifest),
        Step("dependencies", "Installing project dependencies...", install_dependencies),
        Step("hook-manager", "Setting up Lefthook...", setup_hook_manager),
        Step("hook-config", "Setting up lefthook.yml...", artifact_executor("hooks")),
        Step("hook-install", "Installing Lefthook git hooks...", install_hooks),
        Step(
            "ci-workflow",
            "Setting up GitHub Actions...",
            artifact_executor("workflows_dir", "ci_workflow"),
        ),
        Step("pr-template", "Setting up PR template...", artifact_executor("pr_template")),
        Step("gitignore", "Setting up .gitignore...", artifact_executor("gitignore")),
        Step("env-example", "Setting up environment variables...", artifact_executor("env_example")),
        Step("tsconfig", "Checking TypeScript configuration...", artifact_executor("tsconfig")),
        Step("lint-config", "Checking Biome configuration...", init_lint_config),
        Step("test-config", "Checking Jest configuration...", probe_test_config),
        Step("skeleton", "Setting up domain-driven project structure...", build_skeleton),
        Step("compose", "Checking Docker setup...", artifact_executor("compose")),
        Step("manifest-scripts", "Checking package.json scripts...", probe_manifest_scripts),
    ]


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class SetupPipeline:
    """Drives the setup procedure for one target directory.

    Steps run one at a time.  A failure from a fatal step stops the run
    immediately; failures anywhere else are recorded and the next step runs.

    Attributes:
        config: Settings for the run.
        steps: Ordered step descriptors.
        context: Run context shared by every step, including the
            :class:`RunState` accumulator.
    """

    def __init__(self, config: SetupConfig, steps: list[Step] | None = None) -> None:
        self.config = config
        self.steps = steps if steps is not None else default_steps()
        self.context = SetupContext(config=config)

    @property
    def state(self) -> RunState:
        return self.context.state

    async def run(self) -> RunState:
        """Execute every step and print the summary.

        Returns:
            The final :class:`RunState`; its ``exit_code`` is the process
            exit status.
        """
        print_header("Development Skills Setup")
        print_info(f"Target: {self.config.target_dir}")

        for step in self.steps:
            print_info(step.description)
            results = await self._execute(step)
            self.state.record_all(results)

            if step.fatal and any(r.is_failure for r in results):
                self.state.aborted_at = step.name
                print_error(f"Setup aborted: '{step.name}' check failed.")
                return self.state

        self._print_summary()
        return self.state

    async def _execute(self, step: Step) -> list[StepResult]:
        try:
            return await step.executor(self.context)
        except Exception as exc:
            error = SetupError(step.name, str(exc))
            console.print(traceback.format_exc(), style="dim", markup=False, highlight=False)
            return [StepResult.failure(str(error))]

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_summary(self) -> None:
        """Print the final counts, outcome and next steps."""
        state = self.state
        print_header("Setup Complete!")

        if state.outcome is RunOutcome.CLEAN:
            border_style = "bold green"
            status_text = "[bold green]Project setup completed successfully with no issues![/bold green]"
        elif state.outcome is RunOutcome.CAVEATS:
            border_style = "bold yellow"
            status_text = (
                f"[bold green]Project setup completed with {state.warnings} warning(s)[/bold green]"
            )
        else:
            border_style = "bold red"
            status_text = (
                f"[bold red]Project setup completed with {state.failures} error(s) "
                f"and {state.warnings} warning(s)[/bold red]"
            )

        console.print(
            Panel(
                "\n".join([
                    status_text,
                    "",
                    f"Failures : {state.failures}",
                    f"Warnings : {state.warnings}",
                    f"Exit code: {state.exit_code}",
                ]),
                title="[bold]Summary[/bold]",
                border_style=border_style,
            )
        )
        self._print_next_steps()

    def _print_next_steps(self) -> None:
        manager = self.context.package_manager or self.config.package_manager
        steps = ["Review and customize configuration files"]
        if self.context.has_manifest:
            steps.append("Add missing scripts to package.json if needed")
        else:
            steps.append(f"Run '{manager} init' to create package.json")
            steps.append("Add required scripts to package.json (see above)")
        steps.extend([
            "Set up your environment variables in .env",
            "Install additional dependencies as needed",
            "Start developing!",
        ])

        console.print()
        print_info("Next steps:")
        for number, text in enumerate(steps, start=1):
            console.print(f"  {number}. {text}", highlight=False)
        console.print()
        print_warning("Remember to:")
        for text in (
            "Update .env.example with required variables (no secrets)",
            "Set up your GitHub repository and secrets",
        ):
            console.print(f"  - {text}", highlight=False)
        console.print()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``devsetup`` / ``python -m devsetup.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Scaffold React/TypeScript project configuration into a directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  devsetup\n"
            "  devsetup --target ./my-app\n"
            "  devsetup --templates ./shared-templates\n"
        ),
    )
    parser.add_argument(
        "--target",
        default=None,
        help="Directory to set up (default: current directory)",
    )
    parser.add_argument(
        "--templates",
        default=None,
        help="Directory holding *.example templates (default: the target directory)",
    )
    args = parser.parse_args(argv)

    try:
        config = SetupConfig.from_env(
            target_dir=Path(args.target).resolve() if args.target else None,
            template_dir=Path(args.templates).resolve() if args.templates else None,
        )
    except ValidationError as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(1)

    pipeline = SetupPipeline(config)
    state = asyncio.run(pipeline.run())
    sys.exit(state.exit_code)


if __name__ == "__main__":
    main()
