"""Progress tracking for the prebuild phases.

The phase list is fixed, so a summary always names every phase of the stage:
phases never reached stay ``pending`` unless the run marks them ``skipped``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import structlog

log = structlog.get_logger("prebuild.progress")

PHASES = ("metadata", "descriptor_check", "configure", "build", "link")


@dataclass
class PhaseProgress:
    phase: str
    status: str = "pending"  # "pending" | "running" | "completed" | "failed" | "skipped"
    start_time: float | None = None
    end_time: float | None = None
    detail: str = ""
    error: str | None = None

    @property
    def duration(self) -> float | None:
        if self.start_time is not None and self.end_time is not None:
            return round(self.end_time - self.start_time, 2)
        return None


class ProgressTracker:
    """Status of each prebuild phase, kept in execution order."""

    def __init__(self, phases: tuple[str, ...] = PHASES) -> None:
        self.phases = [PhaseProgress(phase=name) for name in phases]
        self._by_name = {p.phase: p for p in self.phases}

    def _get(self, phase: str) -> PhaseProgress:
        try:
            return self._by_name[phase]
        except KeyError:
            raise KeyError(f"Unknown prebuild phase: {phase}") from None

    def start_phase(self, phase: str) -> None:
        p = self._get(phase)
        if p.status == "running":
            # workspace staging opens "configure" before the cmake stage does
            return
        p.status = "running"
        p.start_time = time.monotonic()
        log.debug("progress.phase", phase=phase, status=p.status)

    def complete_phase(self, phase: str, detail: str = "") -> None:
        p = self._get(phase)
        p.status = "completed"
        p.end_time = time.monotonic()
        p.detail = detail
        log.debug("progress.phase", phase=phase, status=p.status)

    def fail_phase(self, phase: str, error: str) -> None:
        p = self._get(phase)
        p.status = "failed"
        p.end_time = time.monotonic()
        p.error = error
        log.debug("progress.phase", phase=phase, status=p.status, error=error)

    def skip_phase(self, phase: str, reason: str) -> None:
        p = self._get(phase)
        p.status = "skipped"
        p.detail = reason
        log.debug("progress.phase", phase=phase, status=p.status, reason=reason)

    def skip_pending(self, reason: str, among: tuple[str, ...] | None = None) -> list[str]:
        """Mark phases not yet started as skipped (all of them, or those in *among*).

        Returns the names of the phases it skipped.
        """
        skipped = [
            p.phase for p in self.phases if p.status == "pending" and (among is None or p.phase in among)
        ]
        for phase in skipped:
            self.skip_phase(phase, reason)
        return skipped

    def status_of(self, phase: str) -> str:
        return self._get(phase).status

    def get_summary(self) -> dict[str, Any]:
        total_duration = sum(p.duration or 0 for p in self.phases)
        return {
            "phases": [
                {
                    "phase": p.phase,
                    "status": p.status,
                    "duration": p.duration,
                    "detail": p.detail,
                    "error": p.error,
                }
                for p in self.phases
            ],
            "total_duration": round(total_duration, 2),
        }
