"""Shared pytest fixtures for the devsetup test suite.

Provides reusable fixtures for:
- Temporary target directories
- A fake shell standing in for node, pnpm, npm, git, corepack and lefthook
- Ready-made configs and run contexts
"""

from __future__ import annotations

import json
from collections.abc import Callable
from contextlib import ExitStack
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from devsetup.config import SetupConfig
from devsetup.models import SetupContext


# ---------------------------------------------------------------------------
# Fake shell
# ---------------------------------------------------------------------------


class FakeShell:
    """Simulates the external tools the setup procedure invokes.

    ``tools`` maps an executable name to the text it prints for
    ``--version``.  Commands whose text starts with an entry of ``failing``
    exit with status 1.  ``effects`` maps an exact command string to a
    callable run (with the working directory) when that command succeeds.
    """

    def __init__(self, tools: dict[str, str] | None = None) -> None:
        self.tools: dict[str, str] = dict(tools or {})
        self.failing: set[str] = set()
        self.outputs: dict[str, str] = {}
        self.calls: list[str] = []
        self.writable = True
        self.effects: dict[str, Callable[[Path | None], None]] = {
            "git init": lambda cwd: (cwd / ".git").mkdir(),
            "npm install -g pnpm": lambda cwd: self.install("pnpm", "9.1.0"),
            "corepack enable && corepack prepare pnpm@latest --activate": (
                lambda cwd: self.install("pnpm", "9.1.0")
            ),
            "pnpm dlx @biomejs/biome init": lambda cwd: (cwd / "biome.json").write_text(
                '{"formatter": {"enabled": true}}\n', encoding="utf-8"
            ),
        }

    def install(self, name: str, version: str = "1.0.0") -> None:
        self.tools[name] = version

    def uninstall(self, name: str) -> None:
        self.tools.pop(name, None)

    def command_exists(self, name: str) -> bool:
        return name in self.tools

    def is_writable(self, path: Any) -> bool:
        return self.writable

    def ran(self, command: str) -> bool:
        return command in self.calls

    async def run_command(
        self,
        cmd: str | list[str],
        cwd: Any = None,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]:
        text = cmd if isinstance(cmd, str) else " ".join(cmd)
        self.calls.append(text)

        tool = text.split()[0]
        if tool not in self.tools:
            return (127, "", f"{tool}: command not found")
        if any(text.startswith(prefix) for prefix in self.failing):
            return (1, "", "simulated failure")
        if text == f"{tool} --version":
            return (0, self.tools[tool], "")

        effect = self.effects.get(text)
        if effect is not None:
            effect(Path(cwd) if cwd else None)
        return (0, self.outputs.get(text, ""), "")


DEFAULT_TOOLS: dict[str, str] = {
    "node": "v20.11.1",
    "pnpm": "9.1.0",
    "npm": "10.2.4",
    "git": "git version 2.43.0",
}


@pytest.fixture
def fake_shell() -> FakeShell:
    """A fake shell with node 20, pnpm, npm and git installed.

    Patched into every module that probes or invokes external commands.
    """
    shell = FakeShell(DEFAULT_TOOLS)
    with ExitStack() as stack:
        for module in ("devsetup.preflight", "devsetup.tooling"):
            stack.enter_context(patch(f"{module}.command_exists", side_effect=shell.command_exists))
            stack.enter_context(patch(f"{module}.run_command", side_effect=shell.run_command))
        stack.enter_context(patch("devsetup.preflight.is_writable", side_effect=shell.is_writable))
        yield shell


# ---------------------------------------------------------------------------
# Paths & configs
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty target directory for a setup run."""
    target = tmp_path / "my-app"
    target.mkdir()
    yield target


@pytest.fixture
def setup_config(project_dir: Path) -> SetupConfig:
    return SetupConfig(target_dir=project_dir)


@pytest.fixture
def ctx(setup_config: SetupConfig) -> SetupContext:
    """A fresh run context for calling step executors directly."""
    return SetupContext(config=setup_config)


@pytest.fixture
def write_manifest(project_dir: Path) -> Callable[..., Path]:
    """Write a ``package.json`` into the target directory."""

    def _write(data: dict[str, Any] | None = None, raw: str | None = None) -> Path:
        path = project_dir / "package.json"
        if raw is not None:
            path.write_text(raw, encoding="utf-8")
        else:
            payload = data if data is not None else {"name": "test-project", "version": "1.0.0"}
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def template_context() -> dict[str, Any]:
    """Context accepted by every bundled default template."""
    return {
        "project_name": "My App",
        "package_manager": "pnpm",
        "node_major": 18,
        "port": 3000,
    }
