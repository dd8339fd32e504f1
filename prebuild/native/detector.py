"""Native sub-project detection and the rebuild trigger set."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

log = structlog.get_logger("prebuild.native")

# Paths relative to the project root, as Cargo resolves rerun-if-changed.
NATIVE_SOURCES = "src/*.c"
NATIVE_HEADERS = "inc/*.h"
OUTER_MANIFEST = "Cargo.toml"
CRATE_SOURCES = "src/"


@dataclass
class NativeProject:
    """A native sub-project found under the project root."""

    root: Path
    manifest_path: Path
    build_system: str = "cmake"


class NativeProjectDetector:
    """Detect a native sub-project by its manifest file (CMakeLists.txt)."""

    def detect(self, project_root: str | Path, manifest: str = "CMakeLists.txt") -> NativeProject | None:
        root = Path(project_root)
        manifest_path = root / manifest
        if manifest_path.is_file():
            log.info("native.detected", manifest=str(manifest_path))
            return NativeProject(root=root, manifest_path=manifest_path)
        log.info("native.absent", manifest=str(manifest_path))
        return None


def rebuild_triggers(manifest: str = "CMakeLists.txt") -> list[str]:
    """Paths whose modification must rerun the prebuild stage.

    Independent of whether the manifest exists.
    """
    return [
        manifest,
        NATIVE_SOURCES,
        NATIVE_HEADERS,
        OUTER_MANIFEST,
        CRATE_SOURCES,
    ]
