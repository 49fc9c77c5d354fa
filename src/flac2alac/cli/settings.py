"""Access to the configuration resolved by the top-level command."""

from __future__ import annotations

import click

from flac2alac.cli.exit_codes import ExitCode
from flac2alac.cli.output import error_exit
from flac2alac.config import ConfigError, Flac2AlacConfig, get_config


def get_cli_config(ctx: click.Context, json_output: bool = False) -> Flac2AlacConfig:
    """Return the config loaded by the main group, loading it if absent.

    Commands invoked directly (as in some tests) have no group context.
    """
    obj = ctx.find_object(dict)
    if obj is not None and obj.get("config") is not None:
        return obj["config"]

    try:
        return get_config()
    except ConfigError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)


def get_logging_overrides(ctx: click.Context) -> dict:
    """Return the --log-* overrides given to the main group."""
    obj = ctx.find_object(dict)
    if obj is None:
        return {}
    return dict(obj.get("logging_overrides", {}))
