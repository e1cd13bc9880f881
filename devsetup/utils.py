"""Shared utility functions for devsetup.

Provides async command execution, tool discovery, file-system helpers and
Rich-based progress reporting.  Command helpers never raise for a non-zero
exit status: callers inspect the returned code and decide whether the outcome
is a warning or a failure.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

console = Console()

# Return code used when the executable itself cannot be found.
COMMAND_NOT_FOUND = 127

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits for as long as the command takes.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A missing executable is
        reported as returncode ``127`` rather than raised.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    try:
        if isinstance(cmd, list):
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
        else:
            process = await asyncio.create_subprocess_shell(
                cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
    except FileNotFoundError as exc:
        return (COMMAND_NOT_FOUND, "", str(exc))

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {format_command(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def command_exists(name: str) -> bool:
    """Return ``True`` if *name* resolves to an executable on ``PATH``."""
    return shutil.which(name) is not None


def format_command(cmd: str | list[str]) -> str:
    """Render a command for display in messages."""
    return cmd if isinstance(cmd, str) else " ".join(cmd)


# ---------------------------------------------------------------------------
# Version helpers
# ---------------------------------------------------------------------------

_MAJOR_RE = re.compile(r"v?(\d+)\.")


def parse_major_version(version: str) -> int | None:
    """Extract the major component from a version string.

    Examples::

        parse_major_version("v20.11.1") -> 20
        parse_major_version("9.4.0")    -> 9
        parse_major_version("unknown")  -> None
    """
    match = _MAJOR_RE.search(version.strip())
    if match is None:
        return None
    return int(match.group(1))


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def is_writable(path: str | Path) -> bool:
    """Return ``True`` if the current process may create files in *path*."""
    return os.access(str(path), os.W_OK)


def append_path_entry(entry: str | Path) -> None:
    """Append *entry* to this process's ``PATH`` if it is not already present."""
    current = os.environ.get("PATH", "")
    parts = current.split(os.pathsep) if current else []
    if str(entry) in parts:
        return
    os.environ["PATH"] = os.pathsep.join([*parts, str(entry)])


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str) -> None:
    """Print a full-width rule used for the banner and the summary."""
    console.print()
    console.print(Rule(f"[bold bright_cyan] {title} [/bold bright_cyan]", style="bright_cyan"))
    console.print()


def print_info(message: str) -> None:
    """Print a blue informational line."""
    console.print(f"[bold blue]ℹ[/bold blue] {escape(message)}", highlight=False)


def print_success(message: str) -> None:
    """Print a green success line."""
    console.print(f"[bold green]✓[/bold green] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning line."""
    console.print(f"[bold yellow]⚠[/bold yellow] {escape(message)}", highlight=False)


def print_error(message: str) -> None:
    """Print a red error line."""
    console.print(f"[bold red]✗[/bold red] {escape(message)}", highlight=False)
