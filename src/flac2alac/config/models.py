"""Configuration data models.

This module defines dataclasses for flac2alac configuration options.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from flac2alac.conversion.models import DEFAULT_WORKERS, OverwritePolicy


def _require_bool(name: str, value: object) -> None:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false, got {value!r}")


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    If not specified, ffmpeg is looked up in PATH.
    """

    ffmpeg: Path | None = None


@dataclass
class ProcessingConfig:
    """Configuration for batch conversion behavior."""

    workers: int = DEFAULT_WORKERS
    """Number of conversions running at once (1 = sequential)."""

    verify: bool = False
    """Hash decoded PCM of source and destination after each conversion."""

    overwrite: OverwritePolicy = OverwritePolicy.SKIP
    """What to do when a destination file already exists."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        _require_bool("verify", self.verify)
        self.overwrite = OverwritePolicy.from_value(self.overwrite)


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "warning"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )
        _require_bool("include_stderr", self.include_stderr)


@dataclass(frozen=True)
class Profile:
    """Named preset of run options, loaded from a YAML file.

    This dataclass is immutable (frozen); all fields are set at
    construction time.
    """

    name: str
    description: str | None = None
    output_root: Path | None = None

    # Override sections, merged key by key over the base config.
    # Values are validated against the section dataclass at load time.
    processing: dict[str, Any] = field(default_factory=dict)
    logging: dict[str, Any] = field(default_factory=dict)


@dataclass
class Flac2AlacConfig:
    """Main configuration container.

    Aggregates all configuration sections.
    """

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
