"""flac2alac doctor command for checking the ffmpeg installation."""

from __future__ import annotations

import json
import sys

import click

from flac2alac.cli.exit_codes import ExitCode
from flac2alac.cli.settings import get_cli_config
from flac2alac.config import get_data_dir, get_default_config_path, list_profiles
from flac2alac.tools import FFmpegInfo, detect_ffmpeg


def _format_status(available: bool) -> str:
    return "✓" if available else "✗"


def _output_json(info: FFmpegInfo) -> None:
    click.echo(
        json.dumps(
            {
                "ffmpeg": {
                    "available": info.available,
                    "path": str(info.path) if info.path else None,
                    "version": info.version,
                    "message": info.status_message,
                },
                "data_dir": str(get_data_dir()),
                "config_file": str(get_default_config_path()),
                "profiles": list_profiles(),
            },
            indent=2,
        )
    )


@click.command("doctor")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output results as JSON",
)
@click.pass_context
def doctor_command(ctx: click.Context, json_output: bool) -> None:
    """Check that ffmpeg is installed and usable.

    Exit codes:
      0 - ffmpeg available
      30 - ffmpeg missing or not answering a version query
    """
    config = get_cli_config(ctx, json_output)
    info = detect_ffmpeg(config.tools.ffmpeg)

    if json_output:
        _output_json(info)
    else:
        click.echo("flac2alac Tool Check")
        click.echo("=" * 40)
        version = info.version or "not found"
        path_info = f" ({info.path})" if info.path else ""
        click.echo(f"  {_format_status(info.available)} ffmpeg: {version}{path_info}")
        if not info.available:
            if info.status_message:
                click.echo(f"    ├─ {info.status_message}")
            click.echo("    └─ Install ffmpeg: https://ffmpeg.org/download.html")
        click.echo()

        config_file = get_default_config_path()
        state = "" if config_file.exists() else " (not present)"
        click.echo(f"Config file: {config_file}{state}")
        profiles = list_profiles()
        click.echo(f"Profiles: {', '.join(profiles) if profiles else '(none)'}")

    if not info.available:
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)
