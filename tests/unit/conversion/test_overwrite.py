"""Tests for overwrite resolution and confirmers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import click
import pytest

from flac2alac.conversion.models import OverwritePolicy
from flac2alac.conversion.overwrite import (
    NonInteractiveConfirmer,
    OverwriteDecision,
    OverwriteResolver,
    TerminalConfirmer,
    is_affirmative,
)


@pytest.fixture
def existing(temp_dir: Path) -> Path:
    path = temp_dir / "track.m4a"
    path.write_bytes(b"old")
    return path


class TestIsAffirmative:
    """Tests for is_affirmative."""

    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "o", "O", "oui", "Oui", " y "])
    def test_accepted_answers(self, answer: str) -> None:
        assert is_affirmative(answer)

    @pytest.mark.parametrize("answer", ["", "n", "no", "non", "yep", "1"])
    def test_rejected_answers(self, answer: str) -> None:
        assert not is_affirmative(answer)


class TestOverwriteResolver:
    """Tests for OverwriteResolver.resolve."""

    @pytest.mark.parametrize("policy", list(OverwritePolicy))
    def test_missing_destination_proceeds(
        self, policy: OverwritePolicy, temp_dir: Path
    ) -> None:
        """Policy is irrelevant when nothing exists yet."""
        confirmer = MagicMock()
        resolver = OverwriteResolver(policy, confirmer)
        assert resolver.resolve(temp_dir / "new.m4a") is OverwriteDecision.PROCEED
        confirmer.confirm.assert_not_called()

    def test_skip_policy_skips(self, existing: Path) -> None:
        resolver = OverwriteResolver(OverwritePolicy.SKIP)
        assert resolver.resolve(existing) is OverwriteDecision.SKIP

    def test_replace_policy_proceeds(self, existing: Path) -> None:
        resolver = OverwriteResolver(OverwritePolicy.REPLACE)
        assert resolver.resolve(existing) is OverwriteDecision.PROCEED

    def test_prompt_asks_confirmer(self, existing: Path) -> None:
        confirmer = MagicMock()
        confirmer.confirm.return_value = True
        resolver = OverwriteResolver(OverwritePolicy.PROMPT, confirmer)

        assert resolver.resolve(existing) is OverwriteDecision.PROCEED
        prompt = confirmer.confirm.call_args.args[0]
        assert str(existing) in prompt

    def test_prompt_declined_skips(self, existing: Path) -> None:
        confirmer = MagicMock()
        confirmer.confirm.return_value = False
        resolver = OverwriteResolver(OverwritePolicy.PROMPT, confirmer)
        assert resolver.resolve(existing) is OverwriteDecision.SKIP

    def test_prompt_in_simulation_never_asks(self, existing: Path) -> None:
        """A dry run treats PROMPT as SKIP without blocking."""
        confirmer = MagicMock()
        resolver = OverwriteResolver(OverwritePolicy.PROMPT, confirmer)
        assert resolver.resolve(existing, simulate=True) is OverwriteDecision.SKIP
        confirmer.confirm.assert_not_called()

    def test_prompt_defaults_to_non_interactive(self, existing: Path) -> None:
        resolver = OverwriteResolver(OverwritePolicy.PROMPT)
        assert isinstance(resolver.confirmer, NonInteractiveConfirmer)
        assert resolver.resolve(existing) is OverwriteDecision.SKIP


class TestTerminalConfirmer:
    """Tests for TerminalConfirmer."""

    def test_uses_reader_answer(self) -> None:
        confirmer = TerminalConfirmer(reader=lambda prompt: "oui")
        assert confirmer.confirm("Replace?") is True

    def test_negative_answer(self) -> None:
        confirmer = TerminalConfirmer(reader=lambda prompt: "n")
        assert confirmer.confirm("Replace?") is False

    def test_abort_declines(self) -> None:
        def reader(prompt: str) -> str:
            raise click.Abort()

        assert TerminalConfirmer(reader=reader).confirm("Replace?") is False

    def test_eof_declines(self) -> None:
        def reader(prompt: str) -> str:
            raise EOFError

        assert TerminalConfirmer(reader=reader).confirm("Replace?") is False


class TestNonInteractiveConfirmer:
    def test_always_declines(self) -> None:
        assert NonInteractiveConfirmer().confirm("Replace?") is False
