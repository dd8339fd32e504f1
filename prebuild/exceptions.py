"""Custom exceptions for the prebuild stage."""


class PrebuildError(Exception):
    """Base exception for all prebuild errors."""


class ConfigurationMissingError(PrebuildError):
    """Raised when the outer build environment omits required identity values."""

    def __init__(self, missing: list[str], detail: str = ""):
        self.missing = missing
        message = f"Missing or invalid build environment values: {', '.join(missing)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class WorkspaceError(PrebuildError):
    """Raised when the metadata fragment or the build workspace cannot be written."""


class ToolNotFoundError(PrebuildError):
    """Raised when an external build tool cannot be located or executed."""

    def __init__(self, stage: str, tool: str):
        self.stage = stage
        self.tool = tool
        super().__init__(
            f"{stage} stage: failed to execute {tool}. "
            f"Make sure {tool} is installed and on PATH."
        )


class ExternalToolError(PrebuildError):
    """Raised when an external build tool runs but exits with a failure status."""

    def __init__(self, stage: str, tool: str, returncode: int):
        self.stage = stage
        self.tool = tool
        self.returncode = returncode
        super().__init__(f"{stage} failed: {tool} exited with status {returncode}")
