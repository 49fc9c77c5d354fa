"""Tests for configuration dataclasses."""

from __future__ import annotations

import pytest

from flac2alac.config.models import LoggingConfig, ProcessingConfig
from flac2alac.conversion.models import OverwritePolicy


class TestProcessingConfig:
    def test_defaults(self) -> None:
        config = ProcessingConfig()
        assert config.workers == 4
        assert config.verify is False
        assert config.overwrite is OverwritePolicy.SKIP

    def test_overwrite_from_string(self) -> None:
        config = ProcessingConfig(overwrite="REPLACE")
        assert config.overwrite is OverwritePolicy.REPLACE

    def test_rejects_zero_workers(self) -> None:
        with pytest.raises(ValueError, match="workers must be at least 1"):
            ProcessingConfig(workers=0)

    def test_rejects_non_bool_verify(self) -> None:
        with pytest.raises(ValueError, match="verify must be true or false"):
            ProcessingConfig(verify="false")  # type: ignore[arg-type]


class TestLoggingConfig:
    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="level must be one of"):
            LoggingConfig(level="trace")

    def test_rejects_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="format must be one of"):
            LoggingConfig(format="xml")

    def test_level_is_case_insensitive(self) -> None:
        assert LoggingConfig(level="DEBUG").level == "DEBUG"
