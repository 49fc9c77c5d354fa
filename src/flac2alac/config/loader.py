"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (FLAC2ALAC_*)
3. Config file (~/.flac2alac/config.toml)
4. Default values

Environment variables:
- FLAC2ALAC_FFMPEG_PATH: Path to ffmpeg executable
- FLAC2ALAC_WORKERS: Number of parallel conversions
- FLAC2ALAC_VERIFY: Verify conversions (true/false)
- FLAC2ALAC_OVERWRITE: Overwrite policy (skip, prompt, replace)
- FLAC2ALAC_CONFIG_PATH: Path to config file (overrides default location)
- FLAC2ALAC_DATA_DIR: Path to data directory (overrides ~/.flac2alac/)
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from flac2alac.config.env import EnvReader
from flac2alac.config.models import (
    Flac2AlacConfig,
    LoggingConfig,
    ProcessingConfig,
    ToolPathsConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".flac2alac"
CONFIG_FILE_NAME = "config.toml"


class ConfigError(Exception):
    """Configuration values are present but invalid."""


def get_data_dir(env_reader: EnvReader | None = None) -> Path:
    """Get the flac2alac data directory.

    Holds config.toml and the profiles/ directory. Can be overridden by
    the FLAC2ALAC_DATA_DIR environment variable (tilde expanded).
    """
    reader = env_reader or EnvReader()
    env_path = reader.get_path("FLAC2ALAC_DATA_DIR", must_exist=False)
    return env_path if env_path is not None else DEFAULT_DATA_DIR


def get_default_config_path(env_reader: EnvReader | None = None) -> Path:
    """Get the config file path.

    FLAC2ALAC_CONFIG_PATH wins over <data dir>/config.toml.
    """
    reader = env_reader or EnvReader()
    env_path = reader.get_path("FLAC2ALAC_CONFIG_PATH", must_exist=False)
    if env_path is not None:
        return env_path
    return get_data_dir(reader) / CONFIG_FILE_NAME


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist or
        cannot be parsed (a warning is logged).
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def _section(file_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = file_config.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table in the config file")
    return section


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    workers: int | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
) -> Flac2AlacConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides FLAC2ALAC_CONFIG_PATH).
        ffmpeg_path: CLI override for the ffmpeg path.
        workers: CLI override for the worker count.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        Flac2AlacConfig with merged configuration.

    Raises:
        ConfigError: If a merged value fails validation.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path or get_default_config_path(reader))

    tools_file = _section(file_config, "tools")
    processing_file = _section(file_config, "processing")
    logging_file = _section(file_config, "logging")

    try:
        tools = ToolPathsConfig(
            ffmpeg=(
                ffmpeg_path
                or reader.get_path("FLAC2ALAC_FFMPEG_PATH")
                or (
                    Path(tools_file["ffmpeg"]).expanduser()
                    if tools_file.get("ffmpeg")
                    else None
                )
            ),
        )

        processing = ProcessingConfig(
            workers=(
                workers
                if workers is not None
                else reader.get_int(
                    "FLAC2ALAC_WORKERS", processing_file.get("workers", 4)
                )
            ),
            verify=reader.get_bool(
                "FLAC2ALAC_VERIFY", processing_file.get("verify", False)
            ),
            overwrite=reader.get_str(
                "FLAC2ALAC_OVERWRITE", processing_file.get("overwrite", "skip")
            ),
        )

        log_file = logging_file.get("file")
        logging_config = LoggingConfig(
            level=logging_file.get("level", "warning"),
            file=Path(log_file).expanduser() if log_file else None,
            format=logging_file.get("format", "text"),
            include_stderr=logging_file.get("include_stderr", False),
            max_bytes=int(logging_file.get("max_bytes", 10_485_760)),
            backup_count=int(logging_file.get("backup_count", 5)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    return Flac2AlacConfig(
        tools=tools,
        processing=processing,
        logging=logging_config,
    )
