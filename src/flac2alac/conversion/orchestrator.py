"""Task orchestration across a bounded worker pool.

Each task runs resolve -> convert -> verify on one worker thread. Task
errors become failed outcomes and never stop sibling tasks; only a
KeyboardInterrupt (or cancel()) ends a run early.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING

from flac2alac.conversion.exceptions import (
    ConversionError,
    InvalidPathError,
    VerificationMismatch,
)
from flac2alac.conversion.models import (
    ConversionTask,
    RunOptions,
    RunSummary,
    TaskOutcome,
)
from flac2alac.conversion.overwrite import OverwriteDecision
from flac2alac.logging import task_context

if TYPE_CHECKING:
    from flac2alac.conversion.executor import ConversionExecutor
    from flac2alac.conversion.overwrite import OverwriteResolver
    from flac2alac.conversion.status import ProgressReporter
    from flac2alac.conversion.verifier import PcmVerifier

logger = logging.getLogger(__name__)

_RESERVED_STEMS = frozenset({"", ".", ".."})

CANCELLED_REASON = "cancelled"


def validate_task(task: ConversionTask) -> None:
    """Reject tasks whose file names cannot be written safely.

    Raises:
        InvalidPathError: If the source stem is empty, "." or "..", or the
            destination resolves to the source itself.
    """
    if task.source.stem in _RESERVED_STEMS:
        raise InvalidPathError(
            task.source, f"Invalid file name {task.source.name!r}"
        )
    if task.destination.resolve() == task.source.resolve():
        raise InvalidPathError(
            task.source, f"Destination would overwrite the source: {task.source}"
        )


class ConversionOrchestrator:
    """Run conversion tasks with bounded parallelism.

    Reporters are notified of task start from worker threads and of task
    completion from the thread calling run().
    """

    def __init__(
        self,
        executor: ConversionExecutor,
        verifier: PcmVerifier | None,
        resolver: OverwriteResolver,
        reporters: Iterable[ProgressReporter] = (),
    ) -> None:
        """Initialize the orchestrator.

        Args:
            executor: Runs the transcode for one task.
            verifier: Compares decoded PCM; required when a run verifies.
            resolver: Applies the overwrite policy.
            reporters: Progress consumers notified during the run.
        """
        self.executor = executor
        self.verifier = verifier
        self.resolver = resolver
        self.reporters = list(reporters)
        self._stop_event = threading.Event()

    def cancel(self) -> None:
        """Stop starting new tasks. Tasks already running finish normally.

        Tasks not yet started are recorded as skipped with reason
        "cancelled". Cancellation is permanent for this orchestrator.
        """
        self._stop_event.set()

    def run(self, tasks: Sequence[ConversionTask], options: RunOptions) -> RunSummary:
        """Run every task and aggregate the outcomes.

        Args:
            tasks: Tasks to run; each is attempted at most once.
            options: Run options, fixed for the whole run.

        Returns:
            RunSummary with one outcome per task, in task order.

        Raises:
            ValueError: If options.verify is set but no verifier was given.
            KeyboardInterrupt: After queued tasks are cancelled and running
                ones have finished.
        """
        if options.verify and self.verifier is None:
            raise ValueError("verification requested but no verifier configured")

        total = len(tasks)
        for reporter in self.reporters:
            reporter.on_start(total)

        logger.info(
            "Starting %d task(s) with %d worker(s)%s",
            total,
            options.workers,
            " (dry run)" if options.simulate else "",
        )

        start_time = time.monotonic()
        outcomes: dict[int, TaskOutcome] = {}
        task_id_width = len(str(total))

        with ThreadPoolExecutor(
            max_workers=options.workers, thread_name_prefix="flac2alac"
        ) as pool:
            futures: dict[Future[TaskOutcome], int] = {}
            for index, task in enumerate(tasks):
                # Worker ID is a logical slot, not the thread that runs the task
                worker_id = f"{(index % options.workers) + 1:02d}"
                task_id = f"T{index + 1:0{task_id_width}d}"
                future = pool.submit(self._run_task, task, options, worker_id, task_id)
                futures[future] = index

            try:
                for future in as_completed(futures):
                    index = futures[future]
                    outcome = future.result()
                    outcomes[index] = outcome
                    for reporter in self.reporters:
                        reporter.on_task_complete(outcome)
            except KeyboardInterrupt:
                logger.warning("Interrupted, waiting for running conversions")
                self._stop_event.set()
                for f in futures:
                    f.cancel()
                pool.shutdown(wait=True, cancel_futures=True)
                raise

        summary = RunSummary(
            outcomes=[outcomes[i] for i in sorted(outcomes)],
            duration_seconds=time.monotonic() - start_time,
            cancelled=self._stop_event.is_set(),
        )
        logger.info(
            "Run finished: %d succeeded, %d skipped, %d failed in %.1fs",
            summary.succeeded,
            summary.skipped,
            len(summary.failed),
            summary.duration_seconds,
        )
        for reporter in self.reporters:
            reporter.on_complete(summary)
        return summary

    def _run_task(
        self,
        task: ConversionTask,
        options: RunOptions,
        worker_id: str,
        task_id: str,
    ) -> TaskOutcome:
        """Worker entry point.

        A task reached after cancel() is recorded as skipped without running.
        """
        if self._stop_event.is_set():
            logger.debug("Cancelled before start: %s", task.source)
            return TaskOutcome.skipped(task, reason=CANCELLED_REASON)

        start_time = time.monotonic()
        with task_context(worker_id, task_id, task.source):
            logger.debug("=== TASK %s: %s", task_id, task.source)
            for reporter in self.reporters:
                reporter.on_task_start(task)

            try:
                outcome = self._process(task, options, start_time)
            except ConversionError as e:
                logger.error("%s", e)
                outcome = TaskOutcome.failed(
                    task, str(e), duration=time.monotonic() - start_time
                )
            except OSError as e:
                logger.error("I/O error for %s: %s", task.source, e)
                outcome = TaskOutcome.failed(
                    task, f"I/O error: {e}", duration=time.monotonic() - start_time
                )
            except Exception as e:
                logger.exception("Unexpected error for %s: %s", task.source, e)
                outcome = TaskOutcome.failed(
                    task,
                    f"Unexpected error: {e}",
                    duration=time.monotonic() - start_time,
                )

        return outcome

    def _process(
        self, task: ConversionTask, options: RunOptions, start_time: float
    ) -> TaskOutcome:
        validate_task(task)

        decision = self.resolver.resolve(task.destination, simulate=options.simulate)
        if decision is OverwriteDecision.SKIP:
            return TaskOutcome.skipped(task, duration=time.monotonic() - start_time)

        if options.simulate:
            logger.info("[DRY-RUN] %s -> %s", task.source, task.destination)
            return TaskOutcome.success(
                task, simulated=True, duration=time.monotonic() - start_time
            )

        self.executor.convert(task)

        if options.verify:
            assert self.verifier is not None
            if not self.verifier.verify(task.source, task.destination):
                raise VerificationMismatch(task.destination)

        return TaskOutcome.success(task, duration=time.monotonic() - start_time)
