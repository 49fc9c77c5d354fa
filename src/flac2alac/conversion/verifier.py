"""Bit-perfect verification by hashing decoded PCM.

Both files are decoded by ffmpeg to raw 32-bit little-endian PCM on stdout,
which is wide enough to hold 16- and 24-bit sources without loss. The
stream is hashed chunk by chunk while ffmpeg runs, so the decoded audio is
never held in memory.
"""

from __future__ import annotations

import hashlib
import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
import tempfile
import time
from pathlib import Path

from flac2alac.conversion.exceptions import DecodeFailure
from flac2alac.core.subprocess_utils import stderr_tail

logger = logging.getLogger(__name__)

PCM_FORMAT = "s32le"
PCM_CODEC = "pcm_s32le"

CHUNK_SIZE = 64 * 1024


def build_decode_command(ffmpeg: Path | str, path: Path) -> list[str]:
    """Build the ffmpeg command line that decodes path's audio to stdout."""
    return [
        str(ffmpeg),
        "-hide_banner",
        "-v",
        "error",
        "-i",
        str(path),
        "-map",
        "0:a:0",
        "-f",
        PCM_FORMAT,
        "-acodec",
        PCM_CODEC,
        "pipe:1",
    ]


class PcmVerifier:
    """Compare two audio files by the SHA-256 of their decoded samples."""

    def __init__(self, ffmpeg_path: Path, chunk_size: int = CHUNK_SIZE) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.chunk_size = chunk_size

    def pcm_digest(self, path: Path) -> str:
        """Decode path and return the hex digest of its PCM stream.

        Raises:
            DecodeFailure: If ffmpeg cannot be launched or exits non-zero.
        """
        cmd = build_decode_command(self.ffmpeg_path, path)
        hasher = hashlib.sha256()
        total_bytes = 0
        start_time = time.monotonic()

        logger.debug("Executing command: %s", " ".join(cmd))

        # Only stdout is drained while ffmpeg runs; stderr is spooled to a file.
        with tempfile.TemporaryFile() as stderr_file:
            try:
                process = subprocess.Popen(  # nosec B603
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except OSError as e:
                raise DecodeFailure(
                    path, f"Could not run ffmpeg to decode {path}: {e}"
                ) from e

            with process:
                assert process.stdout is not None
                for chunk in iter(lambda: process.stdout.read(self.chunk_size), b""):
                    hasher.update(chunk)
                    total_bytes += len(chunk)
                returncode = process.wait()

            if returncode != 0:
                stderr_file.seek(0)
                detail = stderr_tail(stderr_file.read().decode("utf-8", "replace"))
                message = f"ffmpeg failed to decode PCM from {path} (exit {returncode})"
                if detail:
                    message = f"{message}: {detail}"
                raise DecodeFailure(path, message)

        digest = hasher.hexdigest()
        logger.debug(
            "PCM digest for %s: %s",
            path,
            digest,
            extra={
                "pcm_bytes": total_bytes,
                "elapsed_seconds": round(time.monotonic() - start_time, 3),
            },
        )
        return digest

    def verify(self, source: Path, destination: Path) -> bool:
        """Return True if both files decode to identical PCM streams.

        Raises:
            DecodeFailure: If either decode fails.
        """
        source_digest = self.pcm_digest(source)
        destination_digest = self.pcm_digest(destination)
        matched = source_digest == destination_digest
        if matched:
            logger.info("Verified bit-perfect: %s", destination)
        else:
            logger.warning(
                "PCM mismatch: %s (%s) vs %s (%s)",
                source,
                source_digest[:12],
                destination,
                destination_digest[:12],
            )
        return matched
