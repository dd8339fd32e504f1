"""Ordered external-command stages with first-failure short circuit."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import structlog

from prebuild.exceptions import ExternalToolError, PrebuildError, ToolNotFoundError, WorkspaceError
from prebuild.progress import ProgressTracker

log = structlog.get_logger("prebuild.native")


@dataclass
class StageResult:
    stage: str
    tool: str
    ok: bool
    returncode: int | None = None
    error: PrebuildError | None = None

    @classmethod
    def success(cls, stage: str, tool: str) -> StageResult:
        return cls(stage=stage, tool=tool, ok=True, returncode=0)

    @classmethod
    def failure(cls, stage: str, tool: str, error: PrebuildError, returncode: int | None = None) -> StageResult:
        return cls(stage=stage, tool=tool, ok=False, returncode=returncode, error=error)


@dataclass
class CommandStage:
    """One blocking external command, run inside *cwd*.

    stdin is closed; stdout/stderr are inherited so the tool's output stays
    visible in the outer build log. There is no timeout.
    """

    name: str
    tool: str
    cwd: Path
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        return [self.tool, *self.args]

    def run(self) -> StageResult:
        log.info("stage.start", stage=self.name, argv=self.argv, cwd=str(self.cwd))
        if not self.cwd.is_dir():
            log.error("stage.no_workspace", stage=self.name, cwd=str(self.cwd))
            return StageResult.failure(
                self.name,
                self.tool,
                WorkspaceError(f"{self.name} stage: working directory {self.cwd} does not exist"),
            )
        try:
            proc = subprocess.run(self.argv, cwd=self.cwd, stdin=subprocess.DEVNULL)
        except (FileNotFoundError, PermissionError):
            log.error("stage.tool_not_found", stage=self.name, tool=self.tool)
            return StageResult.failure(self.name, self.tool, ToolNotFoundError(self.name, self.tool))

        if proc.returncode != 0:
            log.error("stage.failed", stage=self.name, tool=self.tool, returncode=proc.returncode)
            return StageResult.failure(
                self.name,
                self.tool,
                ExternalToolError(self.name, self.tool, proc.returncode),
                returncode=proc.returncode,
            )

        log.info("stage.completed", stage=self.name)
        return StageResult.success(self.name, self.tool)


class StagePipeline:
    """Run stages in order; stop at the first failure.

    Each stage is tracked as a progress phase of the same name. *before_stage*
    is called with the stage just before it starts.
    """

    def __init__(
        self,
        stages: list[CommandStage],
        progress: ProgressTracker | None = None,
        before_stage: Callable[[CommandStage], None] | None = None,
    ) -> None:
        self.stages = stages
        self.progress = progress
        self.before_stage = before_stage

    def run(self) -> list[StageResult]:
        results: list[StageResult] = []
        for stage in self.stages:
            if self.before_stage:
                self.before_stage(stage)
            if self.progress:
                self.progress.start_phase(stage.name)

            result = stage.run()
            results.append(result)

            if not result.ok:
                if self.progress:
                    self.progress.fail_phase(stage.name, str(result.error))
                break
            if self.progress:
                self.progress.complete_phase(stage.name, detail=" ".join(stage.argv))
        return results
