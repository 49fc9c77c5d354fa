"""Overwrite resolution for destinations that already exist.

The resolver never reads from the terminal itself. Prompting goes through
an injected Confirmer so headless runs can substitute one that never blocks.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

import click

from flac2alac.conversion.models import OverwritePolicy

logger = logging.getLogger(__name__)

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes", "o", "oui"})
"""Answers accepted as "yes", compared case-insensitively."""


class OverwriteDecision(Enum):
    """What to do with a task whose destination may exist."""

    PROCEED = "proceed"
    SKIP = "skip"


class Confirmer(Protocol):
    """Capability to ask the operator a yes/no question."""

    def confirm(self, prompt: str) -> bool:
        """Return True if the operator agreed."""
        ...


class NonInteractiveConfirmer:
    """Confirmer for headless runs: declines every question without blocking."""

    def confirm(self, prompt: str) -> bool:
        logger.debug("No operator available, declining: %s", prompt)
        return False


def _click_reader(prompt: str) -> str:
    return click.prompt(
        prompt, default="", show_default=False, err=True, prompt_suffix=" "
    )


class TerminalConfirmer:
    """Confirmer that reads an answer from the terminal.

    Worker threads share one terminal, so questions are asked one at a time.
    """

    def __init__(self, reader: Callable[[str], str] | None = None) -> None:
        """Initialize the confirmer.

        Args:
            reader: Function that shows a prompt and returns the raw answer.
                Defaults to click.prompt on stderr.
        """
        self._reader = reader or _click_reader
        self._lock = threading.Lock()

    def confirm(self, prompt: str) -> bool:
        with self._lock:
            try:
                answer = self._reader(prompt)
            except (EOFError, click.Abort):
                return False
        return is_affirmative(answer)


def is_affirmative(answer: str) -> bool:
    """Return True if answer is one of the accepted "yes" spellings."""
    return answer.strip().casefold() in AFFIRMATIVE_ANSWERS


class OverwriteResolver:
    """Apply the run-wide overwrite policy to one destination."""

    def __init__(
        self,
        policy: OverwritePolicy,
        confirmer: Confirmer | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            policy: Overwrite policy for the whole run.
            confirmer: Used for OverwritePolicy.PROMPT. Defaults to a
                NonInteractiveConfirmer, which makes PROMPT behave like SKIP.
        """
        self.policy = policy
        self.confirmer: Confirmer = confirmer or NonInteractiveConfirmer()

    def resolve(self, destination: Path, simulate: bool = False) -> OverwriteDecision:
        """Decide whether the task writing destination should run.

        Args:
            destination: Output path of the task.
            simulate: Dry run. PROMPT is treated as SKIP without asking.

        Returns:
            OverwriteDecision.PROCEED or OverwriteDecision.SKIP.
        """
        if not destination.exists():
            return OverwriteDecision.PROCEED

        if self.policy is OverwritePolicy.REPLACE:
            logger.debug("Replacing existing file: %s", destination)
            return OverwriteDecision.PROCEED

        if self.policy is OverwritePolicy.PROMPT and not simulate:
            if self.confirmer.confirm(f"File exists: {destination}. Replace? [y/N]"):
                return OverwriteDecision.PROCEED

        logger.info("Skipping existing file: %s", destination)
        return OverwriteDecision.SKIP
