"""Native build orchestrator: configure, build, announce link directives.

States over one invocation:

    IDLE -> DESCRIPTOR_CHECK -> NOOP
                             -> CONFIGURING -> BUILDING -> LINK_ANNOUNCED
    (workspace or stage failure) -> FAILED

Rebuild triggers and the crate cfg flag are emitted before the descriptor
check, regardless of the outcome. Link directives reach the sink only after
both external commands exit zero.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from prebuild.config import PrebuildConfig
from prebuild.directives import DirectiveSink
from prebuild.exceptions import WorkspaceError
from prebuild.models.directives import CfgFlag, LinkDirective, LinkMode, RerunIfChanged
from prebuild.native.detector import NativeProjectDetector, rebuild_triggers
from prebuild.native.stages import CommandStage, StagePipeline, StageResult
from prebuild.progress import ProgressTracker

log = structlog.get_logger("prebuild.native")


class OrchestratorState(Enum):
    IDLE = "idle"
    DESCRIPTOR_CHECK = "descriptor_check"
    NOOP = "noop"
    CONFIGURING = "configuring"
    BUILDING = "building"
    LINK_ANNOUNCED = "link_announced"
    FAILED = "failed"


NATIVE_PHASES = ("configure", "build", "link")

_STAGE_STATES = {
    "configure": OrchestratorState.CONFIGURING,
    "build": OrchestratorState.BUILDING,
}


@dataclass
class OrchestrationOutcome:
    state: OrchestratorState
    link: LinkDirective | None = None
    stage_results: list[StageResult] = field(default_factory=list)


class NativeBuildOrchestrator:
    """Drive the CMake + Ninja build of a native sub-project."""

    def __init__(
        self,
        config: PrebuildConfig,
        detector: NativeProjectDetector | None = None,
        progress: ProgressTracker | None = None,
    ) -> None:
        self.config = config
        self.detector = detector or NativeProjectDetector()
        self.progress = progress or ProgressTracker()
        self.state = OrchestratorState.IDLE
        self.stage_results: list[StageResult] = []

    def _transition(self, state: OrchestratorState) -> None:
        log.debug("orchestrator.transition", src=self.state.value, dst=state.value)
        self.state = state

    def _enter(self, state: OrchestratorState) -> None:
        if self.state is not state:
            self._transition(state)

    def _abort(self, stage: str) -> None:
        self._transition(OrchestratorState.FAILED)
        self.progress.skip_pending(f"aborted after {stage} failure", among=NATIVE_PHASES)

    def _reset_workspace(self, workspace: Path) -> None:
        root = self.config.project_root.resolve()
        target = workspace.resolve()
        if target == root or root not in target.parents:
            log.warning("orchestrator.reset_refused", workspace=str(workspace), root=str(root))
            return
        log.warning("orchestrator.reset_workspace", workspace=str(workspace))
        shutil.rmtree(target, ignore_errors=True)

    def build_stages(self) -> list[CommandStage]:
        """The configure and build commands, both run inside the workspace."""
        cfg = self.config
        workspace = cfg.workspace_path
        return [
            CommandStage(
                name="configure",
                tool=cfg.configure_tool,
                cwd=workspace,
                args=[
                    "-G",
                    cfg.generator,
                    f"-DCMAKE_BUILD_TYPE={cfg.build_type}",
                    str(cfg.project_root.absolute()),
                ],
            ),
            CommandStage(name="build", tool=cfg.build_tool, cwd=workspace),
        ]

    def run(self, sink: DirectiveSink) -> OrchestrationOutcome:
        """Run one orchestration pass, adding directives to *sink*.

        Raises:
            WorkspaceError: the workspace directory could not be created.
            ToolNotFoundError: cmake or ninja could not be executed.
            ExternalToolError: cmake or ninja exited nonzero.
        """
        cfg = self.config
        self.stage_results = []

        sink.extend([RerunIfChanged(p) for p in rebuild_triggers(cfg.native_manifest)])
        sink.add(CfgFlag(cfg.crate_cfg))

        self._transition(OrchestratorState.DESCRIPTOR_CHECK)
        self.progress.start_phase("descriptor_check")
        project = self.detector.detect(cfg.project_root, manifest=cfg.native_manifest)
        if project is None:
            self.progress.complete_phase("descriptor_check", detail=f"no {cfg.native_manifest}")
            self.progress.skip_pending("no native project", among=NATIVE_PHASES)
            self._transition(OrchestratorState.NOOP)
            return OrchestrationOutcome(state=self.state)
        self.progress.complete_phase("descriptor_check", detail=str(project.manifest_path))

        # workspace staging is part of configuring
        self._transition(OrchestratorState.CONFIGURING)
        self.progress.start_phase("configure")
        workspace = cfg.workspace_path
        try:
            workspace.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = WorkspaceError(f"Failed to create build directory {workspace}: {e}")
            self.progress.fail_phase("configure", str(error))
            self._abort("configure")
            raise error from e

        pipeline = StagePipeline(
            self.build_stages(),
            progress=self.progress,
            before_stage=lambda stage: self._enter(_STAGE_STATES[stage.name]),
        )
        self.stage_results = pipeline.run()

        failed = next((r for r in self.stage_results if not r.ok), None)
        if failed is not None:
            self._abort(failed.stage)
            if cfg.reset_workspace_on_failure:
                self._reset_workspace(workspace)
            raise failed.error

        link = LinkDirective(
            search_path=str(workspace),
            library_name=cfg.library_name,
            link_mode=LinkMode.STATIC,
        )
        self.progress.start_phase("link")
        sink.announce_link(link)
        self.progress.complete_phase("link", detail=f"static={cfg.library_name}")
        self._transition(OrchestratorState.LINK_ANNOUNCED)
        log.info("orchestrator.link_announced", search_path=link.search_path, library=link.library_name)

        return OrchestrationOutcome(state=self.state, link=link, stage_results=self.stage_results)
