"""Tests for CommandStage / StagePipeline: subprocess.run is mocked."""

from __future__ import annotations

import subprocess
from pathlib import Path

from prebuild.exceptions import ExternalToolError, ToolNotFoundError, WorkspaceError
from prebuild.native.stages import CommandStage, StagePipeline
from prebuild.progress import ProgressTracker


class TestCommandStage:
    def test_success(self, fake_tools, tmp_path: Path):
        result = CommandStage("configure", "cmake", tmp_path, ["-G", "Ninja", ".."]).run()
        assert result.ok
        assert result.returncode == 0
        assert result.error is None
        call = fake_tools.calls[0]
        assert call["argv"] == ["cmake", "-G", "Ninja", ".."]
        assert call["cwd"] == tmp_path
        assert call["stdin"] is subprocess.DEVNULL

    def test_output_not_captured(self, fake_tools, tmp_path: Path):
        CommandStage("build", "ninja", tmp_path).run()
        call = fake_tools.calls[0]
        assert "capture_output" not in call
        assert "stdout" not in call
        assert "timeout" not in call

    def test_nonzero_exit(self, fake_tools, tmp_path: Path):
        fake_tools.returncodes["ninja"] = 1
        result = CommandStage("build", "ninja", tmp_path).run()
        assert not result.ok
        assert result.returncode == 1
        assert isinstance(result.error, ExternalToolError)
        assert result.error.stage == "build"
        assert "build failed" in str(result.error)

    def test_tool_not_found(self, fake_tools, tmp_path: Path):
        fake_tools.missing.add("cmake")
        result = CommandStage("configure", "cmake", tmp_path).run()
        assert not result.ok
        assert result.returncode is None
        assert isinstance(result.error, ToolNotFoundError)
        assert "Make sure cmake is installed" in str(result.error)

    def test_missing_workspace_is_not_a_missing_tool(self, fake_tools, tmp_path: Path):
        result = CommandStage("configure", "cmake", tmp_path / "gone").run()
        assert not result.ok
        assert isinstance(result.error, WorkspaceError)
        assert "gone" in str(result.error)
        assert fake_tools.calls == []

    def test_workspace_is_a_file(self, fake_tools, tmp_path: Path):
        not_a_dir = tmp_path / "build"
        not_a_dir.write_text("")
        result = CommandStage("build", "ninja", not_a_dir).run()
        assert isinstance(result.error, WorkspaceError)
        assert fake_tools.calls == []


class TestStagePipeline:
    def _stages(self, cwd: Path) -> list[CommandStage]:
        return [
            CommandStage("configure", "cmake", cwd),
            CommandStage("build", "ninja", cwd),
        ]

    def test_runs_in_order(self, fake_tools, tmp_path: Path):
        results = StagePipeline(self._stages(tmp_path)).run()
        assert [r.stage for r in results] == ["configure", "build"]
        assert all(r.ok for r in results)
        assert fake_tools.tools == ["cmake", "ninja"]

    def test_stops_at_first_failure(self, fake_tools, tmp_path: Path):
        fake_tools.returncodes["cmake"] = 2
        results = StagePipeline(self._stages(tmp_path)).run()
        assert len(results) == 1
        assert not results[0].ok
        assert fake_tools.tools == ["cmake"]

    def test_progress_phases(self, fake_tools, tmp_path: Path):
        fake_tools.returncodes["ninja"] = 1
        progress = ProgressTracker()
        StagePipeline(self._stages(tmp_path), progress=progress).run()
        assert progress.status_of("configure") == "completed"
        assert progress.status_of("build") == "failed"
        assert progress.status_of("link") == "pending"

    def test_before_stage_hook(self, fake_tools, tmp_path: Path):
        seen = []
        StagePipeline(self._stages(tmp_path), before_stage=lambda s: seen.append(s.name)).run()
        assert seen == ["configure", "build"]
