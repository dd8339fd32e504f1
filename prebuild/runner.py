"""Prebuild entry point: metadata fragment, then the native build."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog

from prebuild.config import PrebuildConfig
from prebuild.directives import DirectiveSink
from prebuild.metadata import MetadataEmitter
from prebuild.models.directives import Directive
from prebuild.native.orchestrator import NativeBuildOrchestrator, OrchestrationOutcome
from prebuild.progress import ProgressTracker

log = structlog.get_logger("prebuild")


@dataclass
class PrebuildResult:
    fragment_path: Path
    outcome: OrchestrationOutcome
    directives: list[Directive]
    progress_summary: dict[str, Any]


def run_prebuild(
    config: PrebuildConfig,
    sink: DirectiveSink | None = None,
    progress: ProgressTracker | None = None,
    now: datetime | None = None,
) -> PrebuildResult:
    """Write the metadata fragment, then configure/build/link the native project.

    Every step is a hard prerequisite of the next: any
    :class:`~prebuild.exceptions.PrebuildError` propagates to the caller.
    """
    sink = sink if sink is not None else DirectiveSink()
    progress = progress or ProgressTracker()

    log.info("prebuild.start", package=config.package_name, root=str(config.project_root))

    progress.start_phase("metadata")
    try:
        fragment_path = MetadataEmitter(config).emit(now=now)
    except Exception as e:
        progress.fail_phase("metadata", str(e))
        progress.skip_pending("aborted after metadata failure")
        raise
    progress.complete_phase("metadata", detail=fragment_path.name)

    outcome = NativeBuildOrchestrator(config, progress=progress).run(sink)

    log.info("prebuild.done", state=outcome.state.value, directives=len(sink.directives))
    return PrebuildResult(
        fragment_path=fragment_path,
        outcome=outcome,
        directives=list(sink.directives),
        progress_summary=progress.get_summary(),
    )
