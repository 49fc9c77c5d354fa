"""Task context for structured logging.

Worker threads run each task inside task_context(), which stores the
worker and task identifiers in contextvars. TaskContextFilter copies them
onto every LogRecord so parallel output can be told apart.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_task_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task_id", default=None
)
_task_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task_path", default=None
)


@contextmanager
def task_context(
    worker_id: str,
    task_id: str | None = None,
    path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Context manager scoping log records to one task.

    Previous values are restored on exit, so nested scopes behave.

    Args:
        worker_id: Worker identifier (e.g., "01").
        task_id: Task identifier (e.g., "T003").
        path: Source file being converted.

    Example:
        with task_context("01", "T003", "/music/a.flac"):
            logger.info("Converting")  # [W01:T003] Converting
    """
    tokens = (
        _worker_id.set(worker_id),
        _task_id.set(task_id),
        _task_path.set(str(path) if path is not None else None),
    )
    try:
        yield
    finally:
        _task_path.reset(tokens[2])
        _task_id.reset(tokens[1])
        _worker_id.reset(tokens[0])


def get_task_context() -> tuple[str | None, str | None, str | None]:
    """Get current task context.

    Returns:
        Tuple of (worker_id, task_id, path), any may be None.
    """
    return _worker_id.get(), _task_id.get(), _task_path.get()


class TaskContextFilter(logging.Filter):
    """Logging filter that injects task context into log records.

    Adds worker_id, task_id and task_path attributes, plus a compact
    worker_tag like ``[W01:T003] `` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, task_id, path = get_task_context()

        record.worker_id = worker_id
        record.task_id = task_id
        record.task_path = path

        if worker_id:
            if task_id:
                record.worker_tag = f"[W{worker_id}:{task_id}] "
            else:
                record.worker_tag = f"[W{worker_id}] "
        else:
            record.worker_tag = ""

        return True  # Never filter out records
