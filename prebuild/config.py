"""Prebuild configuration, populated from the outer build environment.

The core never reads ``os.environ`` itself; :meth:`PrebuildConfig.from_env`
is the single place where Cargo-style variables are mapped onto the model.

Required (supplied by Cargo for every build script):
    OUT_DIR, CARGO_MANIFEST_DIR, CARGO_PKG_NAME, CARGO_PKG_VERSION

Optional overrides:
    PREBUILD_FRAGMENT_NAME, PREBUILD_CFG_FLAG, PREBUILD_WORKSPACE_DIR,
    PREBUILD_CMAKE_GENERATOR, PREBUILD_BUILD_TYPE, PREBUILD_CONFIGURE_TOOL,
    PREBUILD_BUILD_TOOL, PREBUILD_LIBRARY_NAME, PREBUILD_RESET_WORKSPACE
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from prebuild.exceptions import ConfigurationMissingError

# Semantic version 2.0.0, including pre-release and build metadata
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?$"
)

REQUIRED_ENV: dict[str, str] = {
    "out_dir": "OUT_DIR",
    "project_root": "CARGO_MANIFEST_DIR",
    "package_name": "CARGO_PKG_NAME",
    "package_version": "CARGO_PKG_VERSION",
}

OPTIONAL_ENV: dict[str, str] = {
    "fragment_name": "PREBUILD_FRAGMENT_NAME",
    "cfg_flag": "PREBUILD_CFG_FLAG",
    "workspace_dir": "PREBUILD_WORKSPACE_DIR",
    "generator": "PREBUILD_CMAKE_GENERATOR",
    "build_type": "PREBUILD_BUILD_TYPE",
    "configure_tool": "PREBUILD_CONFIGURE_TOOL",
    "build_tool": "PREBUILD_BUILD_TOOL",
    "library_name": "PREBUILD_LIBRARY_NAME",
    "reset_workspace_on_failure": "PREBUILD_RESET_WORKSPACE",
}


class PrebuildConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    out_dir: Path
    project_root: Path
    package_name: str
    package_version: str

    fragment_name: str | None = None
    cfg_flag: str | None = None
    native_manifest: str = "CMakeLists.txt"
    workspace_dir: str = "build"
    generator: str = "Ninja"
    build_type: str = "Release"
    configure_tool: str = "cmake"
    build_tool: str = "ninja"
    library_name: str = "native"
    reset_workspace_on_failure: bool = False

    @field_validator("package_name", "package_version", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v

    @field_validator("package_name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:
        if not v:
            raise ValueError("package name must not be empty")
        return v

    @field_validator("package_version")
    @classmethod
    def _semver(cls, v: str) -> str:
        if not _SEMVER_RE.match(v):
            raise ValueError(f"'{v}' is not a semantic version")
        return v

    @field_validator("workspace_dir")
    @classmethod
    def _workspace_inside_root(cls, v: str, info: ValidationInfo) -> str:
        rel = Path(v)
        if not v.strip() or rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"workspace '{v}' must be a relative path inside the project root")
        root = info.data.get("project_root")
        if root is not None:
            # resolve() also catches a symlink pointing back at or above the root
            root = root.resolve()
            target = (root / rel).resolve()
            if target == root or root not in target.parents:
                raise ValueError(f"workspace '{v}' must be a subdirectory of the project root")
        return v

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PrebuildConfig:
        """Build a config from Cargo-style environment variables.

        Raises:
            ConfigurationMissingError: a required variable is absent or empty,
                or the supplied identity does not validate.
        """
        if environ is None:
            environ = os.environ

        missing = [var for var in REQUIRED_ENV.values() if not environ.get(var)]
        if missing:
            raise ConfigurationMissingError(missing)

        values: dict[str, str] = {field: environ[var] for field, var in REQUIRED_ENV.items()}
        for field, var in OPTIONAL_ENV.items():
            if environ.get(var):
                values[field] = environ[var]

        try:
            return cls(**values)
        except ValidationError as e:
            env_names = {**REQUIRED_ENV, **OPTIONAL_ENV}
            invalid = [env_names.get(str(err["loc"][0]), str(err["loc"][0])) for err in e.errors()]
            detail = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationMissingError(invalid, detail=detail) from e

    # ── derived paths and names ──

    @property
    def crate_ident(self) -> str:
        return self.package_name.replace("-", "_")

    @property
    def fragment_path(self) -> Path:
        return self.out_dir / (self.fragment_name or f"{self.crate_ident}_info.rs")

    @property
    def crate_cfg(self) -> str:
        return self.cfg_flag or f"{self.crate_ident}_crate"

    @property
    def manifest_path(self) -> Path:
        return self.project_root / self.native_manifest

    @property
    def workspace_path(self) -> Path:
        return (self.project_root / self.workspace_dir).absolute()
