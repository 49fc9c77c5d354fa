"""Exceptions raised by the conversion pipeline.

Run-level errors (ToolUnavailableError, NoInputFilesError) are raised before
the worker pool starts and abort the whole run. Task-level errors are caught
by the orchestrator and recorded as a failed TaskOutcome; they never abort
sibling tasks.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base exception for conversion errors.

    All pipeline exceptions inherit from this class, allowing callers
    to catch every conversion error with a single except clause.
    """


# =============================================================================
# Run-level errors
# =============================================================================


class ToolUnavailableError(ConversionError):
    """Raised when ffmpeg cannot be found or does not answer a version query.

    Attributes:
        tool: Name of the missing tool.
    """

    def __init__(self, tool: str, detail: str | None = None) -> None:
        self.tool = tool
        message = f"Required tool not available: {tool}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(
            f"{message}. Install it (https://ffmpeg.org/download.html) "
            "or configure its path, then retry."
        )


class NoInputFilesError(ConversionError):
    """Raised when discovery finds nothing to convert.

    Attributes:
        input_path: The path that was searched.
    """

    def __init__(self, input_path: Path, extension: str) -> None:
        self.input_path = input_path
        super().__init__(f"No {extension} files found in {input_path}")


# =============================================================================
# Task-level errors
# =============================================================================


class TaskError(ConversionError):
    """Base exception for errors scoped to a single task.

    Attributes:
        path: The source or destination file the error applies to.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class TranscodeFailure(TaskError):
    """Raised when the transcoding ffmpeg process fails or cannot start."""


class DecodeFailure(TaskError):
    """Raised when a verification decode exits non-zero or cannot start."""


class VerificationMismatch(TaskError):
    """Raised when source and destination decode to different PCM streams."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Bit-perfect verification failed for {path}")


class InvalidPathError(TaskError):
    """Raised when a task's file name cannot be mapped or written safely."""
