"""Tests for the run() facade and BackgroundRun."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from flac2alac.conversion import (
    BackgroundRun,
    NoInputFilesError,
    OverwritePolicy,
    ToolUnavailableError,
    discover,
    run,
)

requires_posix_shell = pytest.mark.skipif(
    sys.platform == "win32", reason="fake ffmpeg is a POSIX shell script"
)


class TestRun:
    """Tests for the blocking run() entry point."""

    def test_missing_ffmpeg_attempts_no_task(self, flac_tree: Path) -> None:
        tasks = discover(flac_tree)
        with patch("flac2alac.tools.detection.shutil.which", return_value=None):
            with pytest.raises(ToolUnavailableError, match="ffmpeg"):
                run(tasks, OverwritePolicy.SKIP, 2, False, False)

        assert not any(t.destination.exists() for t in tasks)

    def test_rejects_bad_parallelism(self, flac_tree: Path) -> None:
        with pytest.raises(ValueError, match="workers"):
            run(discover(flac_tree), "skip", 0, False, False)

    @requires_posix_shell
    def test_converts_and_verifies(
        self, flac_tree: Path, fake_ffmpeg: Path, ffmpeg_calls
    ) -> None:
        tasks = discover(flac_tree)
        summary = run(tasks, "skip", 2, True, False, ffmpeg_path=fake_ffmpeg)

        assert summary.success
        assert summary.succeeded == 3
        for task in tasks:
            assert task.destination.read_bytes() == task.source.read_bytes()
        assert len(ffmpeg_calls("transcode")) == 3
        assert len(ffmpeg_calls("decode")) == 6

    @requires_posix_shell
    def test_simulate_never_transcodes(
        self, flac_tree: Path, fake_ffmpeg: Path, ffmpeg_calls
    ) -> None:
        tasks = discover(flac_tree)
        summary = run(tasks, "replace", 4, True, True, ffmpeg_path=fake_ffmpeg)

        assert summary.succeeded == 3
        assert ffmpeg_calls("transcode") == []
        assert not any(t.destination.exists() for t in tasks)


class TestBackgroundRun:
    """Tests for BackgroundRun."""

    def test_no_input_is_recorded_in_status(self, temp_dir: Path) -> None:
        empty = temp_dir / "empty"
        empty.mkdir()

        background = BackgroundRun(empty).start()
        assert background.join(timeout=10)

        snapshot = background.subscribe_status()
        assert snapshot.done
        assert not snapshot.succeeded
        assert "No .flac files found" in snapshot.errors[0]
        assert isinstance(background.error, NoInputFilesError)
        assert background.summary is None

    def test_missing_ffmpeg_is_recorded_in_status(self, flac_tree: Path) -> None:
        with patch("flac2alac.tools.detection.shutil.which", return_value=None):
            background = BackgroundRun(flac_tree).start()
            assert background.join(timeout=10)

        snapshot = background.subscribe_status()
        assert snapshot.done
        assert snapshot.completed == 0
        assert isinstance(background.error, ToolUnavailableError)

    @requires_posix_shell
    def test_successful_run(self, flac_tree: Path, fake_ffmpeg: Path) -> None:
        background = BackgroundRun(
            flac_tree, parallelism=2, verify=True, ffmpeg_path=fake_ffmpeg
        ).start()
        assert background.join(timeout=30)

        snapshot = background.subscribe_status()
        assert snapshot.done
        assert snapshot.succeeded
        assert (snapshot.total, snapshot.completed) == (3, 3)
        assert snapshot.fraction == 1.0
        assert background.summary is not None
        assert background.summary.success

    @requires_posix_shell
    def test_prompt_behaves_like_skip(
        self, flac_tree: Path, fake_ffmpeg: Path, ffmpeg_calls
    ) -> None:
        (flac_tree / "a.m4a").write_bytes(b"existing")

        background = BackgroundRun(
            flac_tree, policy=OverwritePolicy.PROMPT, ffmpeg_path=fake_ffmpeg
        ).start()
        assert background.join(timeout=30)

        assert background.summary is not None
        assert background.summary.skipped == 1
        assert (flac_tree / "a.m4a").read_bytes() == b"existing"

    @requires_posix_shell
    def test_task_failures_are_listed(self, flac_tree: Path, fake_ffmpeg: Path) -> None:
        (flac_tree / "fail-me.flac").write_bytes(b"bad")

        background = BackgroundRun(flac_tree, ffmpeg_path=fake_ffmpeg).start()
        assert background.join(timeout=30)

        snapshot = background.subscribe_status()
        assert snapshot.done
        assert snapshot.completed == 4
        assert len(snapshot.errors) == 1
        assert "fail-me.flac" in snapshot.errors[0]
