"""CLI module for flac2alac."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from flac2alac.cli.exit_codes import ExitCode
from flac2alac.cli.output import error_exit
from flac2alac.config import (
    ConfigError,
    configure_logging_from_cli,
    get_config,
    get_data_dir,
    get_default_config_path,
)

logger = logging.getLogger(__name__)


def _log_startup_settings(config_path: Path | None, log_level: str) -> None:
    """Log where settings come from, once per invocation."""
    data_dir = get_data_dir()
    config_file = config_path or get_default_config_path()
    home = str(Path.home())
    logger.info(
        "flac2alac starting: data_dir=%s, config=%s (%s), log_level=%s",
        str(data_dir).replace(home, "~"),
        str(config_file).replace(home, "~"),
        "found" if config_file.exists() else "missing",
        log_level,
    )


@click.group()
@click.version_option(package_name="flac2alac")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write logs to a rotating file instead of stderr.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.flac2alac/config.toml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
    config_path: Path | None,
) -> None:
    """flac2alac - Batch-convert FLAC libraries to Apple Lossless (ALAC)."""
    ctx.ensure_object(dict)

    try:
        config = get_config(config_path=config_path)
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    overrides = {
        "level": log_level,
        "file": log_file,
        "format": "json" if log_json else None,
    }
    try:
        logging_config = configure_logging_from_cli(config.logging, **overrides)
    except ValueError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR)

    ctx.obj["config"] = config
    ctx.obj["logging_overrides"] = overrides

    _log_startup_settings(config_path, logging_config.level)


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from flac2alac.cli.convert import convert_command
    from flac2alac.cli.doctor import doctor_command

    main.add_command(convert_command)
    main.add_command(doctor_command)


_register_commands()
