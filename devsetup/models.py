"""Run-scoped data models for the setup procedure.

Every step returns tagged :class:`StepResult` values instead of swallowing
errors; the driver records them into a single :class:`RunState` that owns the
failure and warning counters for the whole run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field

from devsetup.utils import print_error, print_info, print_success, print_warning

if TYPE_CHECKING:
    from devsetup.config import SetupConfig


# ---------------------------------------------------------------------------
# Step results
# ---------------------------------------------------------------------------


class ResultStatus(str, Enum):
    """Tag attached to every line a step reports."""

    OK = "ok"
    SKIPPED = "skipped"
    INFO = "info"
    WARNING = "warning"
    FAILURE = "failure"


class StepResult(BaseModel):
    """Outcome of a single probe, install or artifact action."""

    model_config = ConfigDict(frozen=True)

    status: ResultStatus
    message: str
    remedy: str | None = Field(
        default=None, description="Manual command the user can run instead"
    )

    @classmethod
    def ok(cls, message: str) -> "StepResult":
        return cls(status=ResultStatus.OK, message=message)

    @classmethod
    def skipped(cls, message: str) -> "StepResult":
        return cls(status=ResultStatus.SKIPPED, message=message)

    @classmethod
    def info(cls, message: str) -> "StepResult":
        return cls(status=ResultStatus.INFO, message=message)

    @classmethod
    def warning(cls, message: str, remedy: str | None = None) -> "StepResult":
        return cls(status=ResultStatus.WARNING, message=message, remedy=remedy)

    @classmethod
    def failure(cls, message: str, remedy: str | None = None) -> "StepResult":
        return cls(status=ResultStatus.FAILURE, message=message, remedy=remedy)

    @property
    def is_failure(self) -> bool:
        return self.status is ResultStatus.FAILURE

    @property
    def is_warning(self) -> bool:
        return self.status is ResultStatus.WARNING

    def display(self) -> str:
        """Message text including the suggested remedy, if any."""
        if self.remedy:
            return f"{self.message} Run '{self.remedy}' manually."
        return self.message


# ---------------------------------------------------------------------------
# Run accumulator
# ---------------------------------------------------------------------------


class RunOutcome(str, Enum):
    """Terminal outcome of a run."""

    CLEAN = "clean"
    CAVEATS = "caveats"
    FAILED = "failed"


class RunState(BaseModel):
    """Failure/warning counters for one run of the procedure.

    Created at process start and read once at the end to compute the exit
    code.  Successes are recorded for the transcript but never touch the
    counters.
    """

    failures: int = Field(default=0, ge=0)
    warnings: int = Field(default=0, ge=0)
    results: list[StepResult] = Field(default_factory=list)
    aborted_at: str | None = Field(
        default=None, description="Name of the fatal step that stopped the run"
    )

    def record(self, result: StepResult) -> StepResult:
        """Store *result*, bump the matching counter and print its line."""
        self.results.append(result)
        if result.status is ResultStatus.FAILURE:
            self.failures += 1
        elif result.status is ResultStatus.WARNING:
            self.warnings += 1
        _echo(result)
        return result

    def record_all(self, results: list[StepResult]) -> None:
        for result in results:
            self.record(result)

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    @property
    def exit_code(self) -> int:
        return 1 if self.failures > 0 or self.aborted else 0

    @property
    def outcome(self) -> RunOutcome:
        if self.failures > 0 or self.aborted:
            return RunOutcome.FAILED
        if self.warnings > 0:
            return RunOutcome.CAVEATS
        return RunOutcome.CLEAN


def _echo(result: StepResult) -> None:
    text = result.display()
    if result.status is ResultStatus.OK:
        print_success(text)
    elif result.status is ResultStatus.WARNING:
        print_warning(text)
    elif result.status is ResultStatus.FAILURE:
        print_error(text)
    else:
        print_info(text)


# ---------------------------------------------------------------------------
# Static descriptions
# ---------------------------------------------------------------------------


class ArtifactSpec(BaseModel):
    """One file or directory the scaffolder ensures exists.

    ``template`` is a pre-authored file (relative to the template directory)
    copied verbatim when present.  Otherwise ``default_template`` names a
    bundled Jinja2 template whose rendering becomes the file content.  When
    neither is available, ``on_missing`` decides whether the gap is reported
    as a warning or silently skipped.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Human-readable label used in messages")
    target: str = Field(..., description="Path relative to the target directory")
    kind: Literal["file", "directory"] = Field(default="file")
    template: str | None = Field(default=None)
    default_template: str | None = Field(default=None)
    on_missing: Literal["warn", "skip"] = Field(default="warn")


class ToolRequirement(BaseModel):
    """An external tool the procedure needs, with remediation commands."""

    model_config = ConfigDict(frozen=True)

    name: str
    min_major: int | None = Field(default=None, ge=0)
    install_fallbacks: tuple[str, ...] = Field(
        default=(), description="Shell commands tried in order until one succeeds"
    )


# ---------------------------------------------------------------------------
# Step descriptors and the shared run context
# ---------------------------------------------------------------------------


@dataclass
class SetupContext:
    """Everything a step executor may read or update during one run."""

    config: SetupConfig
    state: RunState = field(default_factory=RunState)
    package_manager: str | None = None
    runtime_version: str | None = None
    has_manifest: bool = False
    hook_manager_available: bool = False
    project_name: str | None = None

    @property
    def root(self) -> Path:
        return self.config.target_dir

    @property
    def manifest_path(self) -> Path:
        return self.config.target_dir / "package.json"

    def template_context(self) -> dict[str, object]:
        """Variables available to the bundled default-content templates."""
        runtime = self.config.runtime
        return {
            "project_name": self.project_name or self.root.name,
            "package_manager": self.package_manager or self.config.package_manager,
            "node_major": runtime.min_major,
            "port": self.config.default_port,
        }


StepExecutor = Callable[[SetupContext], Awaitable[list[StepResult]]]


@dataclass(frozen=True)
class Step:
    """A named unit of the setup procedure.

    When ``fatal`` is set, any failure result from the executor stops the run.
    """

    name: str
    description: str
    executor: StepExecutor
    fatal: bool = False
