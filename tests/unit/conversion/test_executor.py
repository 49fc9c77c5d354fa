"""Tests for the ffmpeg conversion executor."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from flac2alac.conversion.exceptions import TranscodeFailure
from flac2alac.conversion.executor import ConversionExecutor, build_convert_command
from flac2alac.conversion.models import ConversionTask


class TestBuildConvertCommand:
    """Tests for build_convert_command."""

    def test_command_layout(self) -> None:
        cmd = build_convert_command(
            Path("/usr/bin/ffmpeg"), Path("/in/a.flac"), Path("/out/a.m4a")
        )
        assert cmd == [
            "/usr/bin/ffmpeg",
            "-hide_banner",
            "-v",
            "warning",
            "-y",
            "-i",
            "/in/a.flac",
            "-map",
            "0:a:0",
            "-map",
            "0:v?",
            "-c:a",
            "alac",
            "-c:v",
            "copy",
            "-disposition:v",
            "attached_pic",
            "-map_metadata",
            "0",
            "/out/a.m4a",
        ]

    def test_destination_is_last(self) -> None:
        cmd = build_convert_command("ffmpeg", Path("in.flac"), Path("out.m4a"))
        assert cmd[-1] == "out.m4a"


class TestConversionExecutor:
    """Tests for ConversionExecutor.convert."""

    @pytest.fixture
    def task(self, temp_dir: Path) -> ConversionTask:
        source = temp_dir / "a.flac"
        source.write_bytes(b"fLaC")
        return ConversionTask(source, temp_dir / "out" / "deep" / "a.m4a")

    def test_creates_parent_directories(self, task: ConversionTask) -> None:
        with patch(
            "flac2alac.conversion.executor.run_command", return_value=("", "", 0)
        ) as mock_run:
            ConversionExecutor(Path("/usr/bin/ffmpeg")).convert(task)

        assert task.destination.parent.is_dir()
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0][-1] == str(task.destination)

    def test_non_zero_exit_raises_with_stderr_tail(self, task: ConversionTask) -> None:
        stderr = "line one\nInvalid data found when processing input\n"
        with patch(
            "flac2alac.conversion.executor.run_command", return_value=("", stderr, 1)
        ):
            with pytest.raises(TranscodeFailure) as exc_info:
                ConversionExecutor(Path("ffmpeg")).convert(task)

        assert exc_info.value.path == task.source
        assert "exit 1" in str(exc_info.value)
        assert "Invalid data found" in str(exc_info.value)

    def test_launch_failure_raises(self, task: ConversionTask) -> None:
        with patch(
            "flac2alac.conversion.executor.run_command",
            side_effect=FileNotFoundError("No such file: ffmpeg"),
        ):
            with pytest.raises(TranscodeFailure, match="Could not run ffmpeg"):
                ConversionExecutor(Path("ffmpeg")).convert(task)
