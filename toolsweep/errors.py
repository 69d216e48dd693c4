"""Exceptions raised by scanners, the command runner and config loading."""


class ScanError(Exception):
    """Base exception for all toolsweep errors."""


class SourceUnavailable(ScanError):
    """Raised when an ecosystem's tool is not installed or not on the search path."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"'{tool}' not found on the search path")


class IntrospectionParseFailure(ScanError):
    """Raised when a tool's listing output is malformed or changed shape."""

    def __init__(self, tool: str, detail: str):
        self.tool = tool
        self.detail = detail
        super().__init__(f"could not parse output of '{tool}': {detail}")


class SubprocessExecutionFailure(ScanError):
    """Raised when a command cannot be spawned, times out, or exits non-zero."""

    def __init__(self, command: list[str], detail: str, returncode: int | None = None):
        self.command = command
        self.detail = detail
        self.returncode = returncode
        super().__init__(f"{' '.join(command)} failed: {detail}")


class FilesystemAccessDenied(ScanError):
    """Raised when a path cannot be read for permission or I/O reasons."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        super().__init__(f"cannot read {path}" + (f": {detail}" if detail else ""))


class HomeDirectoryUnavailable(ScanError):
    """Raised when the user's home directory cannot be resolved."""


class UnsupportedSource(ScanError):
    """Raised when no adapter exists for a requested source."""


class ConfigError(ScanError):
    """Raised when the config file is malformed or holds wrong value types."""
