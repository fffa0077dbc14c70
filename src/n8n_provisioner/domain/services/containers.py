"""Container startup through Docker Compose."""

from __future__ import annotations

from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.services.base import HostService


class ContainerLauncher(HostService):
    def start(self) -> None:
        """``docker compose up -d`` in the working directory. Readiness is not polled."""
        settings = self._settings
        self._logger.info("containers_starting", work_dir=str(settings.work_dir))
        result = self._sudo(
            "docker",
            "compose",
            "--file",
            str(settings.compose_path),
            "--env-file",
            str(settings.env_path),
            "up",
            "-d",
            cwd=settings.work_dir,
        )
        if not result.ok:
            raise ContainerStartError(
                f"docker compose up failed: {result.detail or f'exit code {result.returncode}'}",
                command=result.rendered,
            )
        self._logger.info("containers_started")


class ContainerStartError(ProvisioningError):
    """Raised when docker compose cannot bring the services up."""

    kind = "ContainerStartError"
