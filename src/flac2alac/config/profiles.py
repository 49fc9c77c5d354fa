"""Configuration profile management.

Profiles store named presets (e.g. "archive" with verification and a fixed
output library, "quick" with more workers) and are applied via the
--profile flag. Each profile is a YAML file in <data dir>/profiles/.

Example profile::

    description: Archive rips into the iTunes library
    output: ~/Music/ALAC
    processing:
      workers: 2
      verify: true
      overwrite: skip
    logging:
      level: info
"""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path
from typing import Any

import yaml

from flac2alac.config.loader import get_data_dir
from flac2alac.config.models import (
    Flac2AlacConfig,
    LoggingConfig,
    ProcessingConfig,
    Profile,
)

logger = logging.getLogger(__name__)

PROFILES_DIR_NAME = "profiles"

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
_TOP_LEVEL_KEYS = frozenset({"name", "description", "output", "processing", "logging"})


class ProfileError(Exception):
    """Error loading or validating a profile."""

    pass


class ProfileNotFoundError(ProfileError):
    """Profile does not exist."""

    pass


def get_profiles_directory(data_dir: Path | None = None) -> Path:
    """Get the profiles directory path.

    Args:
        data_dir: Data directory. Defaults to get_data_dir().

    Returns:
        Path to <data dir>/profiles/
    """
    if data_dir is None:
        data_dir = get_data_dir()
    return data_dir / PROFILES_DIR_NAME


def list_profiles(data_dir: Path | None = None) -> list[str]:
    """List available profile names, sorted.

    Returns:
        List of profile names (without .yaml extension).
    """
    profiles_dir = get_profiles_directory(data_dir)
    if not profiles_dir.exists():
        return []

    return sorted(
        p.stem
        for p in profiles_dir.glob("*.yaml")
        if p.is_file() and not p.name.startswith(".")
    )


def _section_overrides(
    name: str, section: str, data: Any, model: type
) -> dict[str, Any]:
    """Validate one override section against its config dataclass."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {name}: '{section}' must be a mapping")

    allowed = {f.name for f in dataclasses.fields(model)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ProfileError(
            f"Profile {name}: unknown keys in '{section}': {', '.join(unknown)}"
        )

    overrides = dict(data)
    if "file" in overrides and overrides["file"] is not None:
        overrides["file"] = Path(overrides["file"]).expanduser()

    # Values are checked here; the instance itself is discarded
    try:
        model(**overrides)
    except (TypeError, ValueError) as e:
        raise ProfileError(f"Profile {name}: invalid '{section}': {e}") from e

    return overrides


def _validate_and_construct(name: str, data: Any) -> Profile:
    """Build a Profile from parsed YAML, rejecting unknown keys."""
    if not isinstance(data, dict):
        raise ProfileError(f"Profile {name} must be a YAML mapping")

    unknown = sorted(set(data) - _TOP_LEVEL_KEYS)
    if unknown:
        raise ProfileError(f"Profile {name}: unknown keys: {', '.join(unknown)}")

    output = data.get("output")
    return Profile(
        name=data.get("name", name),
        description=data.get("description"),
        output_root=Path(output).expanduser() if output else None,
        processing=_section_overrides(
            name, "processing", data.get("processing"), ProcessingConfig
        ),
        logging=_section_overrides(
            name, "logging", data.get("logging"), LoggingConfig
        ),
    )


def load_profile(name: str, data_dir: Path | None = None) -> Profile:
    """Load a profile by name.

    Args:
        name: Profile name (without .yaml extension).
        data_dir: Data directory. Defaults to get_data_dir().

    Returns:
        Loaded Profile dataclass.

    Raises:
        ProfileNotFoundError: If profile doesn't exist.
        ProfileError: If profile is invalid.
    """
    if not _NAME_PATTERN.match(name):
        raise ProfileError(f"Profile name must be alphanumeric (with - or _): {name}")

    profile_path = get_profiles_directory(data_dir) / f"{name}.yaml"
    if not profile_path.exists():
        raise ProfileNotFoundError(f"Profile not found: {name}")

    try:
        with open(profile_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ProfileError(f"Invalid YAML in profile {name}: {e}") from e

    profile = _validate_and_construct(name, data)
    logger.debug("Loaded profile %s from %s", name, profile_path)
    return profile


def apply_profile(profile: Profile, config: Flac2AlacConfig) -> Flac2AlacConfig:
    """Merge profile settings into a base config.

    Profile settings override the base config. CLI flags (applied later)
    override the profile.

    Precedence (highest wins):
        1. CLI flags
        2. Profile settings
        3. Environment / config file
        4. Defaults

    Returns:
        New Flac2AlacConfig; the base config is left unchanged.
    """
    return dataclasses.replace(
        config,
        processing=dataclasses.replace(config.processing, **profile.processing),
        logging=dataclasses.replace(config.logging, **profile.logging),
    )
