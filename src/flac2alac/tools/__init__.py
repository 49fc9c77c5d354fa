"""External tool detection."""

from flac2alac.tools.detection import (
    FFMPEG,
    FFmpegInfo,
    detect_ffmpeg,
    ensure_ffmpeg_available,
    find_ffmpeg,
    parse_version_string,
)

__all__ = [
    "FFMPEG",
    "FFmpegInfo",
    "detect_ffmpeg",
    "ensure_ffmpeg_available",
    "find_ffmpeg",
    "parse_version_string",
]
