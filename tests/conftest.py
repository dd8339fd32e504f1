"""Shared pytest fixtures for prebuild tests."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from prebuild.config import PrebuildConfig

CMAKELISTS = "cmake_minimum_required(VERSION 3.10)\nproject(native C)\n"


class FakeTools:
    """Stand-in for subprocess.run that records invocations.

    ``returncodes`` maps a tool name to its exit status; tools listed in
    ``missing`` raise FileNotFoundError as if absent from PATH.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.returncodes: dict[str, int] = {}
        self.missing: set[str] = set()

    def __call__(self, argv, **kwargs):
        self.calls.append({"argv": list(argv), **kwargs})
        tool = argv[0]
        if tool in self.missing:
            raise FileNotFoundError(2, "No such file or directory", tool)
        return subprocess.CompletedProcess(argv, self.returncodes.get(tool, 0))

    @property
    def tools(self) -> list[str]:
        return [c["argv"][0] for c in self.calls]


@pytest.fixture
def fake_tools():
    tools = FakeTools()
    with patch("prebuild.native.stages.subprocess.run", side_effect=tools):
        yield tools


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "lexer"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "sv-lexer"\nversion = "0.3.1"\n')
    return root


@pytest.fixture
def native_root(project_root: Path) -> Path:
    (project_root / "CMakeLists.txt").write_text(CMAKELISTS)
    return project_root


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(root: Path, **overrides) -> PrebuildConfig:
        values = {
            "out_dir": tmp_path / "out",
            "project_root": root,
            "package_name": "sv-lexer",
            "package_version": "0.3.1",
        }
        values.update(overrides)
        return PrebuildConfig(**values)

    return _make


@pytest.fixture
def cargo_env(tmp_path: Path, project_root: Path) -> dict[str, str]:
    return {
        "OUT_DIR": str(tmp_path / "out"),
        "CARGO_MANIFEST_DIR": str(project_root),
        "CARGO_PKG_NAME": "sv-lexer",
        "CARGO_PKG_VERSION": "0.3.1",
    }
