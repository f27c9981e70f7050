"""Exception hierarchy for immerse.

All immerse-specific exceptions inherit from ImmerseError. Library code raises
these; only the CLI layer and the batch runner turn them into messages.
"""

from __future__ import annotations

from pathlib import Path


class ImmerseError(Exception):
    """Base exception for all immerse errors."""


class ConfigError(ImmerseError):
    """Configuration file or value is invalid."""


class InputError(ImmerseError):
    """Missing or unreadable input, or malformed arguments."""


class ToolUnavailable(ImmerseError):
    """A required external tool is not installed."""

    def __init__(self, tool: str, install_hint: str | None = None):
        self.tool = tool
        self.install_hint = install_hint
        message = f"{tool} not found"
        if install_hint:
            message += f". Install it with: {install_hint}"
        super().__init__(message)


class EngineFailure(ImmerseError):
    """An external media process exited non-zero or produced unusable output."""

    def __init__(self, cmd: list[str], returncode: int | None, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        tool = cmd[0] if cmd else "engine"
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
        super().__init__(f"{tool} failed (exit {returncode}): {detail}")


class EngineTimeout(EngineFailure):
    """An external media process exceeded its time limit and was killed."""

    def __init__(self, cmd: list[str], timeout: float):
        self.timeout = timeout
        super().__init__(cmd, None, f"timed out after {timeout:g}s")


class JobCancelled(ImmerseError):
    """The job was cancelled while an external process was running."""


class SubtitleUnavailable(ImmerseError):
    """Neither internal nor external subtitles could be obtained."""


class OverwriteConflict(ImmerseError):
    """The destination already exists and overwriting is not allowed."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Output already exists: {path} (use --force to overwrite)")
