"""External tool detection and version parsing.

Locates ffmpeg (configured path first, then PATH) and answers the
availability precondition checked before any conversion runs.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess  # nosec B404 - TimeoutExpired only
from dataclasses import dataclass
from pathlib import Path

from flac2alac.core.subprocess_utils import run_command

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"

# Timeout for version detection commands (seconds)
DETECTION_TIMEOUT = 10

_VERSION_PATTERN = re.compile(r"ffmpeg version (\S+)")


@dataclass(frozen=True)
class FFmpegInfo:
    """Result of probing ffmpeg."""

    path: Path | None
    version: str | None = None
    available: bool = False
    status_message: str | None = None

    @property
    def version_tuple(self) -> tuple[int, ...] | None:
        return parse_version_string(self.version or "")


def parse_version_string(version_str: str) -> tuple[int, ...] | None:
    """Parse a version string into a comparable tuple.

    Handles the formats ffmpeg builds report:
    - "6.1.1" -> (6, 1, 1)
    - "n6.1.1" -> (6, 1, 1)  (nightlies)
    - "7.0-static" -> (7, 0)

    Returns:
        Tuple of version components, or None if parsing fails.
    """
    if not version_str:
        return None

    version_str = version_str.lstrip("nv")
    match = re.match(r"(\d+(?:\.\d+)*)", version_str)
    if not match:
        return None

    return tuple(int(p) for p in match.group(1).split("."))


def find_ffmpeg(configured_path: Path | None = None) -> Path | None:
    """Find the ffmpeg executable.

    Args:
        configured_path: Optional configured path override.

    Returns:
        Path to ffmpeg, or None if not found.
    """
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", FFMPEG, configured_path
        )

    which_result = shutil.which(FFMPEG)
    if which_result:
        return Path(which_result)

    return None


def detect_ffmpeg(configured_path: Path | None = None) -> FFmpegInfo:
    """Locate ffmpeg and run a version query against it.

    Never raises; problems are reported through FFmpegInfo.available and
    FFmpegInfo.status_message.
    """
    path = find_ffmpeg(configured_path)
    if path is None:
        return FFmpegInfo(path=None, status_message=f"{FFMPEG} not found in PATH")

    try:
        stdout, stderr, rc = run_command(
            [path, "-version"], timeout=DETECTION_TIMEOUT
        )
    except subprocess.TimeoutExpired:
        logger.warning("Version query timed out: %s", path)
        return FFmpegInfo(path=path, status_message="version query timed out")
    except OSError as e:
        return FFmpegInfo(path=path, status_message=str(e))

    if rc != 0:
        return FFmpegInfo(
            path=path,
            status_message=f"version query exited with status {rc}: {stderr.strip()}",
        )

    match = _VERSION_PATTERN.search(stdout)
    version = match.group(1) if match else None
    if version is None:
        logger.debug("Could not find a version in ffmpeg output")

    return FFmpegInfo(path=path, version=version, available=True)


def ensure_ffmpeg_available(configured_path: Path | None = None) -> Path:
    """Check the availability precondition and return the usable ffmpeg path.

    Raises:
        ToolUnavailableError: If ffmpeg is missing or its version query fails.
    """
    # Import here to avoid circular imports
    from flac2alac.conversion.exceptions import ToolUnavailableError

    info = detect_ffmpeg(configured_path)
    if not info.available or info.path is None:
        raise ToolUnavailableError(FFMPEG, info.status_message)

    logger.debug("Using %s %s at %s", FFMPEG, info.version or "(unknown)", info.path)
    return info.path
