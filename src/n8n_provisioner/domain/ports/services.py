"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from n8n_provisioner.domain.models.command import CommandResult


class CommandRunner(ABC):
    """Port for executing external system commands.

    Implementations never raise for a non-zero exit status; callers inspect
    the returned :class:`CommandResult` and decide whether to abort.
    """

    @abstractmethod
    def run(
        self,
        cmd: Sequence[str],
        *,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run a command to completion and capture its output."""

    @abstractmethod
    def which(self, command: str) -> str | None:
        """Resolve an executable on PATH, or None if it is not installed."""
