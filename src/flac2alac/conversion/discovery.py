"""Task discovery: find FLAC files and map them to destination paths.

A single file input maps to one task. A directory input is walked
recursively (following symbolic links) and every regular file with a
``.flac`` extension, in any letter case, becomes a task.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flac2alac.conversion.exceptions import NoInputFilesError
from flac2alac.conversion.models import (
    SOURCE_EXTENSION,
    TARGET_EXTENSION,
    ConversionTask,
)

logger = logging.getLogger(__name__)


def is_source_file(path: Path) -> bool:
    """Return True if path is a regular file with the source extension.

    Symbolic links are followed; dangling links are not regular files.
    """
    return path.suffix.casefold() == SOURCE_EXTENSION and path.is_file()


def map_destination(
    source: Path,
    input_root: Path | None = None,
    output_root: Path | None = None,
) -> Path:
    """Compute the destination path for a source file.

    Args:
        source: Source file path.
        input_root: Directory the walk started from. When given together
            with output_root, the source's path relative to it is
            preserved under output_root.
        output_root: Destination root. None writes beside the source.

    Returns:
        Destination path with the target extension.
    """
    file_name = f"{source.stem}{TARGET_EXTENSION}"
    if output_root is None:
        return source.with_name(file_name)

    if input_root is not None:
        try:
            relative = source.relative_to(input_root)
        except ValueError:
            relative = Path(source.name)
        return output_root / relative.parent / file_name

    return output_root / file_name


def _walk_source_files(directory: Path) -> list[Path]:
    """Recursively list source files under directory.

    Directory symlinks are followed. A link resolving to the directory that
    contains it, or to one of that directory's ancestors, is not descended
    into, so cycles terminate. Any other alias of a directory is walked
    under its own path.
    """
    found: list[Path] = []
    # Real paths of the directories above each pending dirpath
    ancestry: dict[str, tuple[str, ...]] = {os.fspath(directory): ()}

    for dirpath, dirnames, filenames in os.walk(directory, followlinks=True):
        chain = ancestry.pop(dirpath, ()) + (os.path.realpath(dirpath),)

        kept = []
        for name in dirnames:
            child = os.path.join(dirpath, name)
            if os.path.realpath(child) in chain:
                logger.debug("Not following directory link cycle: %s", child)
                continue
            ancestry[child] = chain
            kept.append(name)
        dirnames[:] = kept

        for name in filenames:
            path = Path(dirpath) / name
            if is_source_file(path):
                found.append(path)

    return found


def discover(input_path: Path, output_root: Path | None = None) -> list[ConversionTask]:
    """Discover conversion tasks for a file or directory.

    Args:
        input_path: A FLAC file or a directory to search recursively.
        output_root: Optional destination root. Without it, each output is
            written next to its source.

    Returns:
        Tasks ordered by source path.

    Raises:
        NoInputFilesError: If no matching file was found.
    """
    input_path = Path(input_path)
    tasks: list[ConversionTask] = []

    if input_path.is_file():
        if is_source_file(input_path):
            root = output_root if output_root is not None else input_path.parent
            tasks.append(
                ConversionTask(input_path, map_destination(input_path, None, root))
            )
    elif input_path.is_dir():
        for source in sorted(_walk_source_files(input_path)):
            tasks.append(
                ConversionTask(
                    source, map_destination(source, input_path, output_root)
                )
            )

    if not tasks:
        raise NoInputFilesError(input_path, SOURCE_EXTENSION)

    logger.info("Discovered %d file(s) in %s", len(tasks), input_path)
    return tasks
