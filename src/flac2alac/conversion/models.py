"""Data models for the conversion pipeline.

Tasks, options and outcomes are frozen dataclasses: a task is created once
by discovery and consumed once by a worker, and an outcome is handed off to
the aggregator without further mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

SOURCE_EXTENSION = ".flac"
"""Source file extension, matched case-insensitively."""

TARGET_EXTENSION = ".m4a"
"""Canonical extension of the MPEG-4 audio container."""

TARGET_AUDIO_CODEC = "alac"
"""ffmpeg encoder name for Apple Lossless."""

DEFAULT_WORKERS = 4
"""Default degree of parallelism."""


class OverwritePolicy(str, Enum):
    """Run-wide rule for destinations that already exist."""

    SKIP = "skip"  # Leave the existing file, outcome is Skipped
    PROMPT = "prompt"  # Ask the operator (Skip when nobody can answer)
    REPLACE = "replace"  # Always re-run the transcode

    @classmethod
    def from_value(cls, value: str | OverwritePolicy) -> OverwritePolicy:
        """Parse a policy name case-insensitively.

        Raises:
            ValueError: If value is not a known policy.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().casefold())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(
                f"overwrite must be one of {valid}, got {value!r}"
            ) from None


class OutcomeStatus(str, Enum):
    """Terminal state of one task."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionTask:
    """One source-to-destination conversion unit."""

    source: Path
    destination: Path

    @property
    def label(self) -> str:
        """Short display label, e.g. ``track.flac → track.m4a``."""
        return f"{self.source.name} → {self.destination.name}"


@dataclass(frozen=True)
class TaskOutcome:
    """Result of running one task through the pipeline."""

    task: ConversionTask
    status: OutcomeStatus
    reason: str | None = None
    """Failure message, or why a task was skipped without running."""

    simulated: bool = False
    """True when the run was a dry run and nothing was written."""

    duration_seconds: float = 0.0

    @classmethod
    def success(
        cls, task: ConversionTask, *, simulated: bool = False, duration: float = 0.0
    ) -> TaskOutcome:
        return cls(
            task, OutcomeStatus.SUCCESS, simulated=simulated, duration_seconds=duration
        )

    @classmethod
    def skipped(
        cls,
        task: ConversionTask,
        *,
        reason: str | None = None,
        duration: float = 0.0,
    ) -> TaskOutcome:
        return cls(
            task, OutcomeStatus.SKIPPED, reason=reason, duration_seconds=duration
        )

    @classmethod
    def failed(
        cls, task: ConversionTask, reason: str, *, duration: float = 0.0
    ) -> TaskOutcome:
        return cls(
            task, OutcomeStatus.FAILED, reason=reason, duration_seconds=duration
        )

    @property
    def is_failure(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @property
    def error_message(self) -> str:
        """Failure line attributed to the source path."""
        return f"{self.task.source}: {self.reason}"


@dataclass(frozen=True)
class RunOptions:
    """Options fixed before the worker pool starts and read-only afterwards."""

    policy: OverwritePolicy = OverwritePolicy.SKIP
    workers: int = DEFAULT_WORKERS
    verify: bool = False
    simulate: bool = False

    def __post_init__(self) -> None:
        """Validate options."""
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


@dataclass
class RunSummary:
    """Aggregate of every task outcome in one run."""

    outcomes: list[TaskOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0
    cancelled: bool = False
    """True when the run was stopped before every task was attempted."""

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCESS)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[tuple[Path, str]]:
        """Failed tasks as (source path, reason) pairs."""
        return [
            (o.task.source, o.reason or "unknown error")
            for o in self.outcomes
            if o.is_failure
        ]

    @property
    def success(self) -> bool:
        """True iff the run was not cancelled and no task failed."""
        return not self.cancelled and not any(o.is_failure for o in self.outcomes)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "summary": {
                "total": self.total,
                "succeeded": self.succeeded,
                "skipped": self.skipped,
                "failed": len(self.failed),
                "duration_seconds": round(self.duration_seconds, 2),
                "cancelled": self.cancelled,
            },
            "results": [
                {
                    "source": str(o.task.source),
                    "destination": str(o.task.destination),
                    "status": o.status.value,
                    "reason": o.reason,
                    "simulated": o.simulated,
                    "duration_seconds": round(o.duration_seconds, 2),
                }
                for o in self.outcomes
            ],
        }
