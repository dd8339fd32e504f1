"""prebuild: build metadata generation and native library orchestration."""

__version__ = "0.1.0"

from prebuild.config import PrebuildConfig
from prebuild.directives import DirectiveSink, render_cargo
from prebuild.exceptions import (
    ConfigurationMissingError,
    ExternalToolError,
    PrebuildError,
    ToolNotFoundError,
    WorkspaceError,
)
from prebuild.metadata import MetadataEmitter
from prebuild.native.orchestrator import (
    NativeBuildOrchestrator,
    OrchestrationOutcome,
    OrchestratorState,
)
from prebuild.runner import PrebuildResult, run_prebuild

__all__ = [
    "ConfigurationMissingError",
    "DirectiveSink",
    "ExternalToolError",
    "MetadataEmitter",
    "NativeBuildOrchestrator",
    "OrchestrationOutcome",
    "OrchestratorState",
    "PrebuildConfig",
    "PrebuildError",
    "PrebuildResult",
    "ToolNotFoundError",
    "WorkspaceError",
    "render_cargo",
    "run_prebuild",
]
