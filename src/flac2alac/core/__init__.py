"""Core utilities package.

Small helpers with no dependencies on the rest of the codebase.
"""

from flac2alac.core.subprocess_utils import command_name, run_command, stderr_tail

__all__ = ["command_name", "run_command", "stderr_tail"]
