"""CLI command for batch-converting FLAC files to ALAC."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from flac2alac.cli.exit_codes import ExitCode
from flac2alac.cli.output import error_exit
from flac2alac.cli.profile_loader import load_profile_or_exit
from flac2alac.cli.settings import get_cli_config, get_logging_overrides
from flac2alac.config import apply_profile, configure_logging_from_cli
from flac2alac.conversion import (
    BackgroundRun,
    Confirmer,
    ConversionError,
    NoInputFilesError,
    OverwritePolicy,
    RunSummary,
    StatusSnapshot,
    StderrProgressReporter,
    TerminalConfirmer,
    ToolUnavailableError,
    discover,
    run,
)

logger = logging.getLogger(__name__)

# Seconds between status polls in --watch mode
WATCH_INTERVAL = 0.2

PROGRESS_BAR_WIDTH = 30


# =============================================================================
# Worker Count Utilities
# =============================================================================


def resolve_worker_count(requested: int | None, config_default: int) -> int:
    """Resolve the effective worker count.

    Counts above the CPU count are kept, with a warning.

    Args:
        requested: Worker count from CLI (None if not specified).
        config_default: Worker count from profile, environment or config.
    """
    effective = requested if requested is not None else config_default
    cpu_count = os.cpu_count()
    if cpu_count is not None and effective > cpu_count:
        logger.warning(
            "Requested %d workers exceeds %d CPU cores; conversions will "
            "compete for CPU time",
            effective,
            cpu_count,
        )
    return max(1, effective)


def _validate_workers(
    ctx: click.Context, param: click.Parameter, value: int | None
) -> int | None:
    """Validate --workers option value.

    Raises:
        click.BadParameter: If value is less than 1.
    """
    if value is not None and value < 1:
        raise click.BadParameter("must be at least 1")
    return value


def _is_interactive() -> bool:
    """Check if running in interactive mode (TTY).

    Extracted as a function to allow easier mocking in tests.
    """
    return sys.stdin.isatty()


# =============================================================================
# Output Formatting
# =============================================================================


def _exit_code_for(error: BaseException) -> ExitCode:
    if isinstance(error, NoInputFilesError):
        return ExitCode.NO_INPUT_FILES
    if isinstance(error, ToolUnavailableError):
        return ExitCode.TOOL_NOT_AVAILABLE
    return ExitCode.GENERAL_ERROR


def _format_snapshot(snapshot: StatusSnapshot) -> str:
    """Render one polled status line, e.g. ``[#####-----]  3/12 a.flac → a.m4a``."""
    filled = int(snapshot.fraction * PROGRESS_BAR_WIDTH)
    bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
    width = len(str(snapshot.total))
    line = f"[{bar}] {snapshot.completed:>{width}}/{snapshot.total}"
    if snapshot.current_label:
        line = f"{line} {snapshot.current_label}"
    if snapshot.errors:
        line = f"{line} ({len(snapshot.errors)} failed)"
    return line


def _output_summary(
    summary: RunSummary,
    *,
    json_output: bool,
    options: dict,
) -> None:
    if json_output:
        output = {"options": options, **summary.to_dict()}
        click.echo(json.dumps(output, indent=2))
        return

    failed = summary.failed
    mode = "Simulated" if options["dry_run"] else "Converted"
    click.echo("")
    click.echo(
        f"{mode} {summary.total} file(s): {summary.succeeded} ok, "
        f"{summary.skipped} skipped, {len(failed)} failed "
        f"in {summary.duration_seconds:.1f}s"
    )
    if failed:
        click.echo("\nFailures:", err=True)
        for path, reason in failed:
            click.echo(f"  {path}: {reason}", err=True)


# =============================================================================
# Run Modes
# =============================================================================


def _run_headless(
    input_path: Path,
    output_root: Path | None,
    *,
    policy: OverwritePolicy,
    workers: int,
    verify: bool,
    dry_run: bool,
    ffmpeg_path: Path | None,
    confirmer: Confirmer | None,
    json_output: bool,
    verbose: bool,
) -> RunSummary:
    try:
        tasks = discover(input_path, output_root)
    except NoInputFilesError as e:
        error_exit(str(e), ExitCode.NO_INPUT_FILES, json_output)

    if verbose and not json_output:
        click.echo(f"Files: {len(tasks)}")
        click.echo(f"Mode: {'dry-run' if dry_run else 'live'}")
        click.echo(f"Workers: {workers}")
        click.echo(f"Overwrite: {policy.value}")
        click.echo(f"Verify: {'yes' if verify else 'no'}")
        click.echo("")

    try:
        return run(
            tasks,
            policy,
            workers,
            verify,
            dry_run,
            ffmpeg_path=ffmpeg_path,
            confirmer=confirmer,
            reporters=[StderrProgressReporter(enabled=not json_output)],
        )
    except ToolUnavailableError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)
    except KeyboardInterrupt:
        error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)


def _run_watch(
    input_path: Path,
    output_root: Path | None,
    *,
    policy: OverwritePolicy,
    workers: int,
    verify: bool,
    dry_run: bool,
    ffmpeg_path: Path | None,
    json_output: bool,
) -> RunSummary:
    background = BackgroundRun(
        input_path,
        output_root,
        policy=policy,
        parallelism=workers,
        verify=verify,
        simulate=dry_run,
        ffmpeg_path=ffmpeg_path,
    ).start()

    show = not json_output
    try:
        while not background.join(timeout=WATCH_INTERVAL):
            if show:
                line = _format_snapshot(background.subscribe_status())
                click.echo(f"\r{line}\x1b[K", nl=False, err=True)
    except KeyboardInterrupt:
        background.cancel()
        if show:
            click.echo(
                "\nInterrupted - waiting for active conversions to complete...",
                err=True,
            )
        background.join()
        error_exit("Interrupted", ExitCode.INTERRUPTED, json_output)

    if show:
        line = _format_snapshot(background.subscribe_status())
        click.echo(f"\r{line}\x1b[K", err=True)

    if background.error is not None or background.summary is None:
        error = background.error or ConversionError("Run ended without a result")
        error_exit(str(error), _exit_code_for(error), json_output)

    return background.summary


# =============================================================================
# Command
# =============================================================================


@click.command("convert")
@click.argument("input_path", type=click.Path(path_type=Path))
@click.option(
    "--output",
    "-o",
    "output_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Destination root. Default: write each .m4a next to its source.",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=None,
    callback=_validate_workers,
    help="Number of parallel conversions (default: from config, 4).",
)
@click.option(
    "--verify/--no-verify",
    default=None,
    help="Compare decoded PCM of source and output after each conversion.",
)
@click.option(
    "--overwrite",
    type=click.Choice([p.value for p in OverwritePolicy], case_sensitive=False),
    default=None,
    help="What to do when an output file exists (default: skip).",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be converted without writing anything.",
)
@click.option(
    "--profile",
    default=None,
    help="Use named configuration profile from ~/.flac2alac/profiles/.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Output results in JSON format.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Show run settings before converting.",
)
@click.option(
    "--watch",
    is_flag=True,
    default=False,
    help="Show a live progress bar polled from the background run.",
)
@click.pass_context
def convert_command(
    ctx: click.Context,
    input_path: Path,
    output_root: Path | None,
    workers: int | None,
    verify: bool | None,
    overwrite: str | None,
    dry_run: bool,
    profile: str | None,
    json_output: bool,
    verbose: bool,
    watch: bool,
) -> None:
    """Convert FLAC files to ALAC (.m4a).

    INPUT_PATH is a .flac file or a directory searched recursively.
    Metadata and embedded cover art are carried over.

    Examples:

        flac2alac convert ~/Music/FLAC -o ~/Music/ALAC

        flac2alac convert album/ --verify -j 8

        flac2alac convert album/ --overwrite replace --dry-run
    """
    config = get_cli_config(ctx, json_output)

    if profile:
        loaded_profile = load_profile_or_exit(profile, json_output, verbose)
        try:
            config = apply_profile(loaded_profile, config)
        except ValueError as e:
            error_exit(str(e), ExitCode.CONFIG_ERROR, json_output)
        if output_root is None:
            output_root = loaded_profile.output_root
        if loaded_profile.logging:
            configure_logging_from_cli(config.logging, **get_logging_overrides(ctx))

    effective_workers = resolve_worker_count(workers, config.processing.workers)
    policy = (
        OverwritePolicy.from_value(overwrite)
        if overwrite is not None
        else config.processing.overwrite
    )
    effective_verify = verify if verify is not None else config.processing.verify

    confirmer: Confirmer | None = None
    if policy is OverwritePolicy.PROMPT and not dry_run:
        if _is_interactive() and not watch:
            confirmer = TerminalConfirmer()
        else:
            logger.warning(
                "Overwrite prompts need an interactive terminal; "
                "existing files will be skipped"
            )

    run_kwargs = {
        "policy": policy,
        "workers": effective_workers,
        "verify": effective_verify,
        "dry_run": dry_run,
        "ffmpeg_path": config.tools.ffmpeg,
        "json_output": json_output,
    }
    if watch:
        summary = _run_watch(input_path, output_root, **run_kwargs)
    else:
        summary = _run_headless(
            input_path,
            output_root,
            confirmer=confirmer,
            verbose=verbose,
            **run_kwargs,
        )

    _output_summary(
        summary,
        json_output=json_output,
        options={
            "input": str(input_path),
            "output": str(output_root) if output_root else None,
            "workers": effective_workers,
            "overwrite": policy.value,
            "verify": effective_verify,
            "dry_run": dry_run,
        },
    )

    if not summary.success:
        sys.exit(ExitCode.TASKS_FAILED)
