"""Shared plumbing for services that act on the host through a CommandRunner."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog

from n8n_provisioner.config import ProvisionerSettings
from n8n_provisioner.domain.models.command import CommandResult
from n8n_provisioner.domain.ports.services import CommandRunner


class HostService:
    """Base class holding the runner, settings and an injected logger."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: ProvisionerSettings,
        logger: Any | None = None,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._logger = logger if logger is not None else structlog.get_logger(type(self).__module__)

    def _privileged(self, *cmd: str) -> list[str]:
        if self._settings.use_sudo:
            return ["sudo", *cmd]
        return list(cmd)

    def _run(
        self,
        cmd: Sequence[str],
        *,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        return self._runner.run(cmd, input_text=input_text, cwd=cwd)

    def _sudo(
        self,
        *cmd: str,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        return self._run(self._privileged(*cmd), input_text=input_text, cwd=cwd)

    def _installed(self, command: str) -> bool:
        return self._runner.which(command) is not None
