"""Configuration for flac2alac.

Settings come from CLI options, FLAC2ALAC_* environment variables, a TOML
config file and named YAML profiles.
"""

from flac2alac.config.env import EnvReader
from flac2alac.config.loader import (
    ConfigError,
    get_config,
    get_data_dir,
    get_default_config_path,
    load_config_file,
)
from flac2alac.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from flac2alac.config.models import (
    Flac2AlacConfig,
    LoggingConfig,
    ProcessingConfig,
    Profile,
    ToolPathsConfig,
)
from flac2alac.config.profiles import (
    ProfileError,
    ProfileNotFoundError,
    apply_profile,
    list_profiles,
    load_profile,
)

__all__ = [
    "ConfigError",
    "EnvReader",
    "Flac2AlacConfig",
    "LoggingConfig",
    "ProcessingConfig",
    "Profile",
    "ProfileError",
    "ProfileNotFoundError",
    "ToolPathsConfig",
    "apply_profile",
    "build_logging_config",
    "configure_logging_from_cli",
    "get_config",
    "get_data_dir",
    "get_default_config_path",
    "list_profiles",
    "load_config_file",
    "load_profile",
]
