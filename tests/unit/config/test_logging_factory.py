"""Tests for logging config factory."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from flac2alac.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from flac2alac.config.models import LoggingConfig


class TestBuildLoggingConfig:
    """Tests for build_logging_config function."""

    def test_returns_copy_of_base_with_no_overrides(self) -> None:
        base = LoggingConfig(level="info", format="json", max_bytes=1000)
        result = build_logging_config(base)
        assert result == base
        assert result is not base

    def test_overrides_are_applied(self, temp_dir: Path) -> None:
        base = LoggingConfig()
        result = build_logging_config(
            base,
            level="debug",
            file=temp_dir / "f.log",
            format="json",
            include_stderr=True,
        )
        assert result.level == "debug"
        assert result.file == temp_dir / "f.log"
        assert result.format == "json"
        assert result.include_stderr is True

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="level must be one of"):
            build_logging_config(LoggingConfig(), level="verbose")


class TestConfigureLoggingFromCli:
    def test_configures_root_logger(self, temp_dir: Path) -> None:
        log_file = temp_dir / "logs" / "flac2alac.log"
        applied = configure_logging_from_cli(
            LoggingConfig(), level="info", file=log_file
        )

        assert applied.level == "info"
        logging.getLogger("flac2alac.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
