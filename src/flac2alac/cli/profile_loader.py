"""Profile loading with consistent CLI error handling."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, NoReturn

import click

from flac2alac.cli.exit_codes import ExitCode
from flac2alac.cli.output import error_exit
from flac2alac.config.profiles import (
    ProfileError,
    ProfileNotFoundError,
    list_profiles,
    load_profile,
)

if TYPE_CHECKING:
    from flac2alac.config.models import Profile


def load_profile_or_exit(
    profile_name: str,
    json_output: bool = False,
    verbose: bool = False,
) -> Profile:
    """Load a profile, exiting with a CLI error if it cannot be loaded.

    Args:
        profile_name: Name of profile to load (without .yaml extension).
        json_output: Whether to format errors as JSON.
        verbose: Whether to print the profile name on success.

    Returns:
        Loaded Profile object.
    """
    try:
        profile = load_profile(profile_name)
    except ProfileNotFoundError as e:
        _show_available_profiles_and_exit(str(e), json_output)
    except ProfileError as e:
        error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)

    if verbose and not json_output:
        click.echo(f"Using profile: {profile.name}")
    return profile


def _show_available_profiles_and_exit(
    error_msg: str,
    json_output: bool,
) -> NoReturn:
    if json_output:
        error_exit(error_msg, ExitCode.PROFILE_NOT_FOUND, json_output)

    click.echo(f"Error: {error_msg}", err=True)
    available = list_profiles()
    if available:
        click.echo("\nAvailable profiles:", err=True)
        for name in available:
            click.echo(f"  - {name}", err=True)
    sys.exit(ExitCode.PROFILE_NOT_FOUND)
