"""Subprocess utilities for external tool invocation.

Every ffmpeg call that runs to completion before its output is inspected
goes through run_command(), so command logging and text decoding are
handled the same way everywhere. Streaming calls (PCM decode for
verification) use subprocess.Popen directly.
"""

from __future__ import annotations

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def command_name(args: list[str]) -> str:
    """Return the executable's base name for log records."""
    return Path(args[0]).name if args else "unknown"


def run_command(
    args: list[str | Path],
    timeout: float | None = None,
    capture_output: bool = True,
    text: bool = True,
    errors: str = "replace",
    **kwargs: Any,
) -> tuple[str, str, int]:
    """Run an external command and wait for it to exit.

    Args:
        args: Command and arguments. Path objects are converted to strings.
        timeout: Timeout in seconds. None waits for the process to exit.
        capture_output: Capture stdout/stderr (default True).
        text: Return text instead of bytes (default True).
        errors: Error handling mode for text decoding (default "replace").
        **kwargs: Additional subprocess.run arguments.

    Returns:
        Tuple of (stdout, stderr, returncode).

    Raises:
        OSError: If the executable cannot be launched.
        subprocess.TimeoutExpired: If a timeout was given and expired.
    """
    str_args = [str(arg) for arg in args]
    name = command_name(str_args)

    logger.debug(
        "Executing command: %s",
        " ".join(str_args),
        extra={"command": name, "arg_count": len(str_args)},
    )

    start_time = time.monotonic()
    result = subprocess.run(  # nosec B603 - caller builds args from fixed flags
        str_args,
        capture_output=capture_output,
        text=text,
        errors=errors,
        timeout=timeout,
        **kwargs,
    )

    elapsed = time.monotonic() - start_time
    logger.debug(
        "Command completed",
        extra={
            "command": name,
            "elapsed_seconds": round(elapsed, 3),
            "returncode": result.returncode,
        },
    )

    return result.stdout or "", result.stderr or "", result.returncode


def stderr_tail(stderr: str, max_lines: int = 5) -> str:
    """Return the last non-empty lines of stderr joined on one line.

    ffmpeg prints the actual error at the end of its output; earlier lines
    are usually banner or stream mapping noise.
    """
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    return " | ".join(lines[-max_lines:])
