"""Structured logging for flac2alac.

Text or JSON output, optional rotating log file, and per-task context
tags for parallel conversions.
"""

from flac2alac.logging.config import configure_logging
from flac2alac.logging.context import (
    TaskContextFilter,
    get_task_context,
    task_context,
)
from flac2alac.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "TaskContextFilter",
    "configure_logging",
    "get_task_context",
    "task_context",
]
