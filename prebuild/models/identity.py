"""Build identity embedded into the compiled artifact."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


@dataclass(frozen=True)
class BuildIdentity:
    """Identity constants captured once per prebuild run."""

    build_timestamp: str  # e.g. "2026-10-18 09:14:02 UTC"
    package_version: str  # semver, e.g. "0.3.1"
    package_name: str

    @classmethod
    def capture(
        cls,
        package_name: str,
        package_version: str,
        now: datetime | None = None,
    ) -> BuildIdentity:
        """Stamp the identity with *now* (default: the current UTC instant)."""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return cls(
            build_timestamp=now.strftime(TIMESTAMP_FORMAT),
            package_version=package_version,
            package_name=package_name,
        )
