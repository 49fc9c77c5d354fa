"""FLAC to ALAC conversion pipeline.

Discovery maps source files to tasks, the orchestrator runs them across a
worker pool (overwrite resolution, ffmpeg transcode, optional PCM
verification), and progress flows to every registered reporter.
"""

from flac2alac.conversion.discovery import discover, map_destination
from flac2alac.conversion.exceptions import (
    ConversionError,
    DecodeFailure,
    InvalidPathError,
    NoInputFilesError,
    TaskError,
    ToolUnavailableError,
    TranscodeFailure,
    VerificationMismatch,
)
from flac2alac.conversion.executor import ConversionExecutor
from flac2alac.conversion.models import (
    DEFAULT_WORKERS,
    ConversionTask,
    OutcomeStatus,
    OverwritePolicy,
    RunOptions,
    RunSummary,
    TaskOutcome,
)
from flac2alac.conversion.orchestrator import ConversionOrchestrator
from flac2alac.conversion.overwrite import (
    Confirmer,
    NonInteractiveConfirmer,
    OverwriteDecision,
    OverwriteResolver,
    TerminalConfirmer,
)
from flac2alac.conversion.runner import BackgroundRun, build_orchestrator, run
from flac2alac.conversion.status import (
    NullProgressReporter,
    ProgressReporter,
    RunStatus,
    StatusSnapshot,
    StderrProgressReporter,
)
from flac2alac.conversion.verifier import PcmVerifier

__all__ = [
    "DEFAULT_WORKERS",
    "BackgroundRun",
    "Confirmer",
    "ConversionError",
    "ConversionExecutor",
    "ConversionOrchestrator",
    "ConversionTask",
    "DecodeFailure",
    "InvalidPathError",
    "NoInputFilesError",
    "NonInteractiveConfirmer",
    "NullProgressReporter",
    "OutcomeStatus",
    "OverwriteDecision",
    "OverwritePolicy",
    "OverwriteResolver",
    "PcmVerifier",
    "ProgressReporter",
    "RunOptions",
    "RunStatus",
    "RunSummary",
    "StatusSnapshot",
    "StderrProgressReporter",
    "TaskError",
    "TaskOutcome",
    "TerminalConfirmer",
    "ToolUnavailableError",
    "TranscodeFailure",
    "VerificationMismatch",
    "build_orchestrator",
    "discover",
    "map_destination",
    "run",
]
