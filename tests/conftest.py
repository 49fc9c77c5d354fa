"""Shared test fixtures for flac2alac."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

# Stand-in for ffmpeg: copies the input on transcode, streams it on decode,
# fails for any input whose name contains "fail", and appends its argv to
# $FAKE_FFMPEG_LOG.
FAKE_FFMPEG_SCRIPT = """\
#!/bin/sh
if [ -n "$FAKE_FFMPEG_LOG" ]; then
    echo "$*" >> "$FAKE_FFMPEG_LOG"
fi
if [ "$1" = "-version" ]; then
    echo "ffmpeg version 6.1-fake Copyright (c) 2000-2023 the FFmpeg developers"
    exit 0
fi
input=""
prev=""
last=""
for arg in "$@"; do
    if [ "$prev" = "-i" ]; then
        input="$arg"
    fi
    prev="$arg"
    last="$arg"
done
case "$input" in
    *fail*)
        echo "$input: simulated failure" >&2
        exit 1
        ;;
esac
if [ "$last" = "pipe:1" ]; then
    cat "$input"
else
    cp "$input" "$last"
fi
"""


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def flac2alac_data_dir(temp_dir: Path):
    """Point FLAC2ALAC_DATA_DIR at an empty temporary directory.

    Keeps tests from reading the developer's ~/.flac2alac config and
    profiles, and clears every other FLAC2ALAC_* override.
    """
    data_dir = temp_dir / ".flac2alac"
    data_dir.mkdir(parents=True, exist_ok=True)

    env = {k: v for k, v in os.environ.items() if not k.startswith("FLAC2ALAC_")}
    env["FLAC2ALAC_DATA_DIR"] = str(data_dir)
    with patch.dict(os.environ, env, clear=True):
        yield data_dir


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo root logger changes made by configure_logging()."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def fake_ffmpeg(temp_dir: Path) -> Path:
    """Install the fake ffmpeg script and return its path.

    Invocations are logged to ``<temp_dir>/ffmpeg.log``; see ffmpeg_calls.
    """
    bin_dir = temp_dir / "bin"
    bin_dir.mkdir()
    script = bin_dir / "ffmpeg"
    script.write_text(FAKE_FFMPEG_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log_path = temp_dir / "ffmpeg.log"
    with patch.dict(os.environ, {"FAKE_FFMPEG_LOG": str(log_path)}):
        yield script


@pytest.fixture
def ffmpeg_calls(temp_dir: Path):
    """Return a function listing the argv lines the fake ffmpeg received."""

    def _calls(kind: str | None = None) -> list[str]:
        log_path = temp_dir / "ffmpeg.log"
        if not log_path.exists():
            return []
        lines = log_path.read_text().splitlines()
        if kind == "transcode":
            return [line for line in lines if "-c:a alac" in line]
        if kind == "decode":
            return [line for line in lines if line.endswith("pipe:1")]
        return lines

    return _calls


@pytest.fixture
def flac_tree(temp_dir: Path) -> Path:
    """Create a small library of fake FLAC files.

    Layout::

        library/
            a.flac
            notes.txt
            Artist/Album/01 Track.flac
            Artist/Album/02 Track.FLAC
    """
    root = temp_dir / "library"
    album = root / "Artist" / "Album"
    album.mkdir(parents=True)
    (root / "a.flac").write_bytes(b"fLaC-a")
    (root / "notes.txt").write_text("not audio")
    (album / "01 Track.flac").write_bytes(b"fLaC-01")
    (album / "02 Track.FLAC").write_bytes(b"fLaC-02")
    return root
