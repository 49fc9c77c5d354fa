"""Progress reporting for conversion runs.

The orchestrator notifies every registered ProgressReporter. Two consumers
ship with the package:

- StderrProgressReporter streams one line per finished task (headless CLI).
- RunStatus keeps a lock-protected shared record that interactive front
  ends poll through snapshot().
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import click

from flac2alac.conversion.models import OutcomeStatus

if TYPE_CHECKING:
    from flac2alac.conversion.models import ConversionTask, RunSummary, TaskOutcome

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Protocol for consumers of orchestrator progress.

    Methods are called from worker threads; implementations must be
    thread-safe.
    """

    def on_start(self, total: int) -> None:
        """Called once before any task is scheduled."""
        ...

    def on_task_start(self, task: ConversionTask) -> None:
        """Called by a worker when it picks up a task."""
        ...

    def on_task_complete(self, outcome: TaskOutcome) -> None:
        """Called exactly once per task with its outcome."""
        ...

    def on_complete(self, summary: RunSummary) -> None:
        """Called once after every task has an outcome."""
        ...


class NullProgressReporter:
    """No-op progress reporter for tests and JSON output."""

    def on_start(self, total: int) -> None:
        pass

    def on_task_start(self, task: ConversionTask) -> None:
        pass

    def on_task_complete(self, outcome: TaskOutcome) -> None:
        pass

    def on_complete(self, summary: RunSummary) -> None:
        pass


_STATUS_TAGS = {
    OutcomeStatus.SUCCESS: "OK",
    OutcomeStatus.SKIPPED: "SKIPPED",
    OutcomeStatus.FAILED: "FAILED",
}


class StderrProgressReporter:
    """Streaming per-task indicator for headless runs.

    Writes ``[ 3/12] OK       track.flac → track.m4a`` to stderr as each
    task finishes, in completion order.
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize stderr progress reporter.

        Args:
            enabled: If False, suppresses output (for JSON mode).
        """
        self.enabled = enabled
        self.total = 0
        self.completed = 0
        self.active = 0
        self._lock = threading.Lock()

    def on_start(self, total: int) -> None:
        with self._lock:
            self.total = total
            self.completed = 0
            self.active = 0

    def on_task_start(self, task: ConversionTask) -> None:
        with self._lock:
            self.active += 1

    def on_task_complete(self, outcome: TaskOutcome) -> None:
        with self._lock:
            self.active = max(0, self.active - 1)
            self.completed += 1
            line = self._format_line(outcome, self.completed, self.total)
            # Output stays under the lock so lines from workers never interleave
            if self.enabled:
                click.echo(line, err=True)

    def on_complete(self, summary: RunSummary) -> None:
        pass

    @staticmethod
    def _format_line(outcome: TaskOutcome, completed: int, total: int) -> str:
        width = len(str(total))
        tag = "DRY-RUN" if outcome.simulated else _STATUS_TAGS[outcome.status]
        line = f"[{completed:>{width}}/{total}] {tag:<8} {outcome.task.label}"
        if outcome.reason:
            line = f"{line}: {outcome.reason}"
        return line


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only copy of a RunStatus taken under its lock."""

    total: int
    completed: int
    current_label: str
    errors: tuple[str, ...]
    done: bool
    cancelled: bool = False

    @property
    def fraction(self) -> float:
        """Completed share in [0.0, 1.0]."""
        if self.total <= 0:
            return 1.0 if self.done else 0.0
        return self.completed / self.total

    @property
    def succeeded(self) -> bool:
        """True once the run is done, was not cancelled and had no error."""
        return self.done and not self.cancelled and not self.errors


class RunStatus:
    """Shared progress record polled by interactive front ends.

    Every mutation and every snapshot read happens under one lock. Completing
    a task increments the counter and appends its failure in the same
    critical section, so a poller never sees one without the other.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._completed = 0
        self._current_label = ""
        self._errors: list[str] = []
        self._done = False
        self._cancelled = False

    def begin(self, total: int) -> None:
        """Reset the record for a new run of total tasks."""
        with self._lock:
            self._total = total
            self._completed = 0
            self._current_label = ""
            self._errors = []
            self._done = False
            self._cancelled = False

    def record_outcome(self, outcome: TaskOutcome) -> None:
        """Count one finished task, and its failure if it failed."""
        with self._lock:
            if self._completed >= self._total:
                logger.warning(
                    "Progress tracking: outcome for %s exceeds total (%d)",
                    outcome.task.source,
                    self._total,
                )
                return
            self._completed += 1
            if outcome.is_failure:
                self._errors.append(outcome.error_message)

    def fail(self, message: str) -> None:
        """Record a run-level error and mark the run as done."""
        with self._lock:
            self._errors.append(message)
            self._current_label = ""
            self._done = True

    def finish(self, cancelled: bool = False) -> None:
        """Mark the run as done, and as cancelled if it was stopped early."""
        with self._lock:
            self._current_label = ""
            self._done = True
            self._cancelled = cancelled

    def snapshot(self) -> StatusSnapshot:
        """Return a consistent copy of the current state."""
        with self._lock:
            return StatusSnapshot(
                total=self._total,
                completed=self._completed,
                current_label=self._current_label,
                errors=tuple(self._errors),
                done=self._done,
                cancelled=self._cancelled,
            )

    # ProgressReporter protocol

    def on_start(self, total: int) -> None:
        self.begin(total)

    def on_task_start(self, task: ConversionTask) -> None:
        with self._lock:
            self._current_label = task.label

    def on_task_complete(self, outcome: TaskOutcome) -> None:
        self.record_outcome(outcome)

    def on_complete(self, summary: RunSummary) -> None:
        self.finish(cancelled=summary.cancelled)
