"""Unit tests for JSONFormatter."""

import json
import logging
import sys

from flac2alac.logging.context import TaskContextFilter, task_context
from flac2alac.logging.handlers import JSONFormatter


def _record(msg: str = "hello %s", args: tuple = ("world",), **extra):
    record = logging.LogRecord(
        name="flac2alac.conversion",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter.format."""

    def test_basic_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["message"] == "hello world"
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "flac2alac.conversion"
        assert entry["timestamp"].endswith("+00:00")
        assert "context" not in entry

    def test_extra_attributes_go_to_context(self) -> None:
        record = _record(command="ffmpeg", returncode=1)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["context"] == {"command": "ffmpeg", "returncode": 1}

    def test_task_context_is_included(self) -> None:
        record = _record()
        with task_context("02", "T010", "/music/b.flac"):
            TaskContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))

        assert entry["context"] == {
            "worker_id": "02",
            "task_id": "T010",
            "task_path": "/music/b.flac",
        }

    def test_empty_task_context_is_omitted(self) -> None:
        record = _record()
        TaskContextFilter().filter(record)
        entry = json.loads(JSONFormatter().format(record))
        assert "context" not in entry

    def test_exception_is_formatted(self) -> None:
        try:
            raise ValueError("bad value")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad value" in entry["exception"]

    def test_non_serializable_extra_uses_str(self) -> None:
        record = _record(payload=object())
        entry = json.loads(JSONFormatter().format(record))
        assert entry["context"]["payload"].startswith("<object object")
