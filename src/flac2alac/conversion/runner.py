"""Entry points used by the front ends.

run() is the blocking headless path. BackgroundRun drives discovery and
run() on its own thread and exposes a polled RunStatus for interactive
displays.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path

from flac2alac.conversion.discovery import discover
from flac2alac.conversion.exceptions import ConversionError
from flac2alac.conversion.executor import ConversionExecutor
from flac2alac.conversion.models import (
    DEFAULT_WORKERS,
    ConversionTask,
    OverwritePolicy,
    RunOptions,
    RunSummary,
)
from flac2alac.conversion.orchestrator import ConversionOrchestrator
from flac2alac.conversion.overwrite import (
    Confirmer,
    NonInteractiveConfirmer,
    OverwriteResolver,
)
from flac2alac.conversion.status import ProgressReporter, RunStatus, StatusSnapshot
from flac2alac.conversion.verifier import PcmVerifier
from flac2alac.tools.detection import ensure_ffmpeg_available

logger = logging.getLogger(__name__)


def build_orchestrator(
    ffmpeg_path: Path,
    policy: OverwritePolicy,
    confirmer: Confirmer | None = None,
    reporters: Iterable[ProgressReporter] = (),
) -> ConversionOrchestrator:
    """Wire the executor, verifier and resolver around one ffmpeg binary."""
    return ConversionOrchestrator(
        executor=ConversionExecutor(ffmpeg_path),
        verifier=PcmVerifier(ffmpeg_path),
        resolver=OverwriteResolver(policy, confirmer),
        reporters=reporters,
    )


def run(
    tasks: Sequence[ConversionTask],
    policy: OverwritePolicy | str,
    parallelism: int,
    verify: bool,
    simulate: bool,
    *,
    ffmpeg_path: Path | None = None,
    confirmer: Confirmer | None = None,
    reporters: Iterable[ProgressReporter] = (),
) -> RunSummary:
    """Convert tasks after checking that ffmpeg is available.

    Args:
        tasks: Tasks from discover().
        policy: Overwrite policy for the run.
        parallelism: Number of worker threads (at least 1).
        verify: Compare decoded PCM of source and destination.
        simulate: Dry run; resolve overwrites but write nothing.
        ffmpeg_path: Configured ffmpeg; PATH is searched otherwise.
        confirmer: Answers overwrite prompts; declines when None.
        reporters: Progress consumers.

    Raises:
        ToolUnavailableError: If ffmpeg is unusable. No task is attempted.
        ValueError: If policy or parallelism is invalid.
    """
    options = RunOptions(
        policy=OverwritePolicy.from_value(policy),
        workers=parallelism,
        verify=verify,
        simulate=simulate,
    )
    ffmpeg = ensure_ffmpeg_available(ffmpeg_path)
    orchestrator = build_orchestrator(ffmpeg, options.policy, confirmer, reporters)
    return orchestrator.run(tasks, options)


class BackgroundRun:
    """A discovery + conversion run on a background thread.

    Overwrite prompts are never shown; PROMPT behaves like SKIP. Errors
    raised before any task runs (no input files, missing ffmpeg) are
    recorded in the status with done set.

    Example:
        background = BackgroundRun(Path("~/Music/FLAC")).start()
        while not (snapshot := background.subscribe_status()).done:
            render(snapshot)
            time.sleep(0.2)
    """

    def __init__(
        self,
        input_path: Path,
        output_root: Path | None = None,
        *,
        policy: OverwritePolicy | str = OverwritePolicy.SKIP,
        parallelism: int = DEFAULT_WORKERS,
        verify: bool = False,
        simulate: bool = False,
        ffmpeg_path: Path | None = None,
        reporters: Iterable[ProgressReporter] = (),
    ) -> None:
        self.input_path = input_path
        self.output_root = output_root
        self.policy = policy
        self.parallelism = parallelism
        self.verify = verify
        self.simulate = simulate
        self.ffmpeg_path = ffmpeg_path
        self.status = RunStatus()
        self.summary: RunSummary | None = None
        self.error: Exception | None = None

        self._reporters = list(reporters)
        self._orchestrator: ConversionOrchestrator | None = None
        self._cancelled = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="flac2alac-background", daemon=True
        )

    def start(self) -> BackgroundRun:
        self._thread.start()
        return self

    def subscribe_status(self) -> StatusSnapshot:
        """Return a consistent snapshot of the run's progress."""
        return self.status.snapshot()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the run to end. Returns True if it has ended."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def cancel(self) -> None:
        """Stop scheduling new tasks; running conversions finish."""
        self._cancelled.set()
        if self._orchestrator is not None:
            self._orchestrator.cancel()

    def _run(self) -> None:
        try:
            tasks = discover(self.input_path, self.output_root)
            options = RunOptions(
                policy=OverwritePolicy.from_value(self.policy),
                workers=self.parallelism,
                verify=self.verify,
                simulate=self.simulate,
            )
            ffmpeg = ensure_ffmpeg_available(self.ffmpeg_path)
            self._orchestrator = build_orchestrator(
                ffmpeg,
                options.policy,
                NonInteractiveConfirmer(),
                [self.status, *self._reporters],
            )
            if self._cancelled.is_set():
                self._orchestrator.cancel()
            self.summary = self._orchestrator.run(tasks, options)
        except (ConversionError, ValueError) as e:
            logger.error("%s", e)
            self.error = e
            self.status.fail(str(e))
        except Exception as e:
            logger.exception("Background run failed: %s", e)
            self.error = e
            self.status.fail(f"Unexpected error: {e}")
