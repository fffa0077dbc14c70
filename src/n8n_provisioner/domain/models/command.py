"""Result of an external command invocation."""

from __future__ import annotations

from n8n_provisioner.domain.models.base import ValueObject


class CommandResult(ValueObject):
    """Normalized command execution result."""

    cmd: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def detail(self) -> str:
        """Best available diagnostic text for a failed command."""
        return (self.stderr or "").strip() or (self.stdout or "").strip()

    @property
    def rendered(self) -> str:
        return " ".join(self.cmd)
