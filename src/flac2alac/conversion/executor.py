"""FFmpeg conversion executor.

Runs one ffmpeg process per task to re-encode the first audio stream to
ALAC, carry the cover-art stream over unchanged and copy container
metadata from source to destination.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flac2alac.conversion.exceptions import TranscodeFailure
from flac2alac.conversion.models import TARGET_AUDIO_CODEC, ConversionTask
from flac2alac.core.subprocess_utils import run_command, stderr_tail

logger = logging.getLogger(__name__)


def build_convert_command(
    ffmpeg: Path | str, source: Path, destination: Path
) -> list[str]:
    """Build the ffmpeg command line for one conversion.

    Maps the first audio stream plus any video stream (embedded artwork is
    exposed by ffmpeg as a video stream), re-encodes audio to ALAC, copies
    the picture stream and flags it as attached cover art, and copies global
    metadata from input 0.
    """
    return [
        str(ffmpeg),
        "-hide_banner",
        "-v",
        "warning",
        "-y",
        "-i",
        str(source),
        "-map",
        "0:a:0",
        "-map",
        "0:v?",
        "-c:a",
        TARGET_AUDIO_CODEC,
        "-c:v",
        "copy",
        "-disposition:v",
        "attached_pic",
        "-map_metadata",
        "0",
        str(destination),
    ]


class ConversionExecutor:
    """Executor for FLAC to ALAC conversion using ffmpeg.

    The executor:
    1. Creates missing destination parent directories
    2. Runs ffmpeg synchronously (blocking until the process exits)
    3. Raises TranscodeFailure on a non-zero exit or launch error

    A failed run may leave a partial destination file behind; removing it is
    left to the caller.
    """

    def __init__(self, ffmpeg_path: Path) -> None:
        """Initialize the executor.

        Args:
            ffmpeg_path: Path to a verified ffmpeg executable.
        """
        self.ffmpeg_path = ffmpeg_path

    def convert(self, task: ConversionTask) -> None:
        """Convert task.source into task.destination.

        Raises:
            TranscodeFailure: If ffmpeg cannot be launched or exits non-zero.
            OSError: If the destination directory cannot be created.
        """
        task.destination.parent.mkdir(parents=True, exist_ok=True)

        cmd = build_convert_command(self.ffmpeg_path, task.source, task.destination)
        logger.info("Converting %s -> %s", task.source, task.destination)

        try:
            _, stderr, returncode = run_command(cmd)
        except OSError as e:
            raise TranscodeFailure(
                task.source, f"Could not run ffmpeg for {task.source}: {e}"
            ) from e

        if returncode != 0:
            detail = stderr_tail(stderr)
            message = f"ffmpeg failed for {task.source} (exit {returncode})"
            if detail:
                message = f"{message}: {detail}"
            raise TranscodeFailure(task.source, message)

        if stderr.strip():
            logger.debug("ffmpeg warnings for %s: %s", task.source, stderr_tail(stderr))
