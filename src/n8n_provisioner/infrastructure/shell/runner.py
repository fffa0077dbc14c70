"""Subprocess-backed command runner."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import structlog

from n8n_provisioner.domain.models.command import CommandResult
from n8n_provisioner.domain.ports.services import CommandRunner


logger = structlog.get_logger(__name__)

COMMAND_NOT_FOUND = 127


def format_cmd(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(token)) for token in cmd)


class SubprocessCommandRunner(CommandRunner):
    """Thin blocking ``subprocess.run`` wrapper.

    Output is always captured as text. No timeout is applied: a command runs
    until it exits or the operator interrupts the process.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = dict(env) if env else None

    def which(self, command: str) -> str | None:
        resolved = shutil.which(command)
        if resolved is None:
            return None
        return str(Path(resolved).resolve())

    def run(
        self,
        cmd: Sequence[str],
        *,
        input_text: str | None = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        tokens = tuple(str(token) for token in cmd)
        run_env = os.environ.copy()
        if self._env:
            run_env.update(self._env)

        logger.debug("command_started", cmd=format_cmd(tokens), cwd=str(cwd) if cwd else None)
        try:
            completed = subprocess.run(
                list(tokens),
                cwd=str(cwd) if cwd else None,
                env=run_env,
                input=input_text,
                stdin=None if input_text is not None else subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
                errors="replace",
            )
        except FileNotFoundError as e:
            logger.debug("command_not_found", cmd=format_cmd(tokens), error=str(e))
            return CommandResult(cmd=tokens, returncode=COMMAND_NOT_FOUND, stderr=str(e))

        result = CommandResult(
            cmd=tokens,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        logger.debug("command_finished", cmd=format_cmd(tokens), returncode=result.returncode)
        return result
