"""Tests for the metadata emitter: no subprocesses involved."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from prebuild.exceptions import WorkspaceError
from prebuild.metadata import MetadataEmitter, render_fragment
from prebuild.models.identity import BuildIdentity

FIXED_NOW = datetime(2026, 10, 18, 9, 14, 2, tzinfo=timezone.utc)


class TestBuildIdentity:
    def test_capture_format(self):
        identity = BuildIdentity.capture("sv-lexer", "0.3.1", now=FIXED_NOW)
        assert identity.build_timestamp == "2026-10-18 09:14:02 UTC"
        assert identity.package_name == "sv-lexer"
        assert identity.package_version == "0.3.1"

    def test_capture_converts_to_utc(self):
        local = FIXED_NOW.astimezone(timezone(timedelta(hours=2)))
        identity = BuildIdentity.capture("x", "1.0.0", now=local)
        assert identity.build_timestamp == "2026-10-18 09:14:02 UTC"

    def test_capture_live_clock(self):
        identity = BuildIdentity.capture("x", "1.0.0")
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} UTC", identity.build_timestamp)


class TestRenderFragment:
    def test_one_declaration_per_field(self):
        text = render_fragment(BuildIdentity("2026-10-18 09:14:02 UTC", "0.3.1", "sv-lexer"))
        assert text == (
            'pub const BUILD_TIME: &str = "2026-10-18 09:14:02 UTC";\n'
            'pub const PKG_VERSION: &str = "0.3.1";\n'
            'pub const PKG_NAME: &str = "sv-lexer";\n'
        )

    def test_escapes_string_literals(self):
        text = render_fragment(BuildIdentity("t", "1.0.0", 'we"ird\\name'))
        assert 'pub const PKG_NAME: &str = "we\\"ird\\\\name";' in text


class TestMetadataEmitter:
    def test_writes_fragment(self, make_config, project_root: Path):
        config = make_config(project_root)
        path = MetadataEmitter(config).emit(now=FIXED_NOW)
        assert path == config.fragment_path
        content = path.read_text()
        assert content.count("pub const ") == 3
        assert '"2026-10-18 09:14:02 UTC"' in content

    def test_overwrites_not_appends(self, make_config, project_root: Path):
        config = make_config(project_root)
        emitter = MetadataEmitter(config)
        emitter.emit(now=FIXED_NOW)
        emitter.emit(now=FIXED_NOW + timedelta(seconds=5))
        content = config.fragment_path.read_text()
        assert content.count("BUILD_TIME") == 1
        assert "09:14:07" in content

    def test_creates_out_dir(self, make_config, project_root: Path, tmp_path: Path):
        config = make_config(project_root, out_dir=tmp_path / "deep" / "out")
        assert MetadataEmitter(config).emit().exists()

    def test_write_failure(self, make_config, project_root: Path):
        config = make_config(project_root)
        with patch.object(Path, "write_text", side_effect=PermissionError("read-only")):
            with pytest.raises(WorkspaceError, match="metadata fragment"):
                MetadataEmitter(config).emit()
