"""Integration tests for BackgroundRun with a stand-in ffmpeg."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from flac2alac.conversion import BackgroundRun, NoInputFilesError, ToolUnavailableError

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        sys.platform == "win32", reason="fake ffmpeg is a POSIX shell script"
    ),
]


class TestBackgroundRun:
    """Tests for BackgroundRun."""

    def test_completes_and_reports_status(
        self, fake_ffmpeg: Path, flac_tree: Path
    ) -> None:
        background = BackgroundRun(
            flac_tree, parallelism=2, verify=True, ffmpeg_path=fake_ffmpeg
        ).start()

        assert background.join(timeout=30)
        snapshot = background.subscribe_status()
        assert snapshot.done
        assert snapshot.succeeded
        assert (snapshot.completed, snapshot.total) == (3, 3)
        assert background.error is None
        assert background.summary is not None
        assert background.summary.succeeded == 3

    def test_prompt_behaves_like_skip(
        self, fake_ffmpeg: Path, flac_tree: Path, ffmpeg_calls
    ) -> None:
        (flac_tree / "a.m4a").write_bytes(b"existing")

        background = BackgroundRun(
            flac_tree, policy="prompt", ffmpeg_path=fake_ffmpeg
        ).start()
        background.join(timeout=30)

        assert background.summary.skipped == 1
        assert (flac_tree / "a.m4a").read_bytes() == b"existing"
        assert len(ffmpeg_calls("transcode")) == 2

    def test_failures_are_listed_in_status(
        self, fake_ffmpeg: Path, flac_tree: Path
    ) -> None:
        (flac_tree / "fail.flac").write_bytes(b"broken")

        background = BackgroundRun(flac_tree, ffmpeg_path=fake_ffmpeg).start()
        background.join(timeout=30)

        snapshot = background.subscribe_status()
        assert snapshot.done
        assert not snapshot.succeeded
        assert len(snapshot.errors) == 1
        assert "fail.flac" in snapshot.errors[0]
        assert background.summary.success is False

    def test_no_input_recorded_as_error(
        self, fake_ffmpeg: Path, temp_dir: Path
    ) -> None:
        background = BackgroundRun(temp_dir, ffmpeg_path=fake_ffmpeg).start()
        background.join(timeout=30)

        assert isinstance(background.error, NoInputFilesError)
        assert background.summary is None
        snapshot = background.subscribe_status()
        assert snapshot.done
        assert snapshot.errors

    def test_missing_ffmpeg_recorded_as_error(self, flac_tree: Path) -> None:
        with patch("flac2alac.tools.detection.shutil.which", return_value=None):
            background = BackgroundRun(flac_tree).start()
            background.join(timeout=30)

        assert isinstance(background.error, ToolUnavailableError)
        assert not list(flac_tree.rglob("*.m4a"))

    def test_cancel_before_start_converts_nothing(
        self, fake_ffmpeg: Path, flac_tree: Path, ffmpeg_calls
    ) -> None:
        background = BackgroundRun(flac_tree, ffmpeg_path=fake_ffmpeg)
        background.cancel()
        background.start().join(timeout=30)

        assert background.summary is not None
        assert background.summary.cancelled is True
        assert background.summary.total == 3
        assert background.summary.success is False
        assert ffmpeg_calls("transcode") == []
        snapshot = background.subscribe_status()
        assert (snapshot.completed, snapshot.total) == (3, 3)
        assert not snapshot.succeeded
