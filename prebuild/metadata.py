"""Metadata emitter: writes the build identity fragment into OUT_DIR."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import structlog

from prebuild.config import PrebuildConfig
from prebuild.exceptions import WorkspaceError
from prebuild.models.identity import BuildIdentity

log = structlog.get_logger("prebuild.metadata")


def _rust_str(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_fragment(identity: BuildIdentity) -> str:
    """Rust constant declarations, one per identity field."""
    return (
        f'pub const BUILD_TIME: &str = "{_rust_str(identity.build_timestamp)}";\n'
        f'pub const PKG_VERSION: &str = "{_rust_str(identity.package_version)}";\n'
        f'pub const PKG_NAME: &str = "{_rust_str(identity.package_name)}";\n'
    )


class MetadataEmitter:
    """Capture a fresh :class:`BuildIdentity` and write it as a source fragment."""

    def __init__(self, config: PrebuildConfig) -> None:
        self.config = config

    def emit(self, now: datetime | None = None) -> Path:
        """Write the fragment, replacing any previous content.

        Returns:
            Path of the written fragment.

        Raises:
            WorkspaceError: OUT_DIR or the fragment could not be written.
        """
        identity = BuildIdentity.capture(
            self.config.package_name, self.config.package_version, now=now
        )
        dest = self.config.fragment_path
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(render_fragment(identity))
        except OSError as e:
            raise WorkspaceError(f"Cannot write metadata fragment {dest}: {e}") from e

        log.info(
            "metadata.written",
            path=str(dest),
            package=identity.package_name,
            version=identity.package_version,
            build_time=identity.build_timestamp,
        )
        return dest
