"""Environment generation: the compose descriptor and its ``.env`` secret file."""

from __future__ import annotations

import base64
import os
import secrets
from pathlib import Path
from typing import Any

import structlog
from dotenv import dotenv_values
from pydantic import SecretStr

from n8n_provisioner.config import ProvisionerSettings
from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.models.deployment import (
    DeploymentConfig,
    DeploymentMode,
    EnvironmentFiles,
    EnvironmentState,
)
from n8n_provisioner.infrastructure.templates.compose import referenced_variables, render_compose
from n8n_provisioner.infrastructure.templates.env_file import (
    defined_variables,
    render_dev_env,
    render_live_env,
)


def generate_password(num_bytes: int = 16) -> str:
    """Base64 encoding of ``num_bytes`` random bytes (minimum 16)."""
    if num_bytes < 16:
        raise ValueError("database password needs at least 16 bytes of entropy")
    return base64.b64encode(secrets.token_bytes(num_bytes)).decode("ascii")


class EnvironmentGenerator:
    """Produces the descriptor/secret pair without clobbering an existing deployment.

    Both texts are rendered and cross-checked in memory before anything is
    written, so a failed precondition leaves the working directory untouched.
    """

    def __init__(self, settings: ProvisionerSettings, logger: Any | None = None) -> None:
        self._settings = settings
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def compose_path(self) -> Path:
        return self._settings.compose_path

    @property
    def env_path(self) -> Path:
        return self._settings.env_path

    def inspect(self) -> EnvironmentState:
        compose_exists = self.compose_path.exists()
        env_exists = self.env_path.exists()
        if compose_exists and env_exists:
            return EnvironmentState.COMPLETE
        if compose_exists or env_exists:
            return EnvironmentState.PARTIAL
        return EnvironmentState.CLEAN

    def ensure_clean(self) -> None:
        existing = [str(p) for p in (self.compose_path, self.env_path) if p.exists()]
        if existing:
            raise ExistingDeploymentError(
                "Existing deployment files found: "
                f"{', '.join(existing)}. Remove them before running to prevent data loss.",
                existing=", ".join(existing),
            )

    def render(self, config: DeploymentConfig) -> EnvironmentFiles:
        """Render both texts; the returned config carries the password actually used."""
        app, db = self._settings.app, self._settings.database
        descriptor = render_compose(app, db, config.mode)

        if config.mode == DeploymentMode.DEV:
            if config.db_password is not None:
                password = config.db_password.get_secret_value()
            else:
                password = generate_password(db.password_bytes)
                config = config.model_copy(update={"db_password": SecretStr(password)})
            env_text = render_dev_env(config, db, password)
        else:
            env_text = render_live_env(config, db)

        missing = referenced_variables(descriptor) - defined_variables(env_text)
        if missing:
            raise EnvironmentConsistencyError(
                f"Descriptor references undefined variables: {', '.join(sorted(missing))}",
                missing=", ".join(sorted(missing)),
            )

        return EnvironmentFiles(
            config=config,
            compose_path=self.compose_path,
            env_path=self.env_path,
            compose_descriptor=descriptor,
            env_file=env_text,
        )

    def generate(self, config: DeploymentConfig) -> EnvironmentFiles:
        """Write both files for ``config.mode``; fails if either already exists.

        A write failure removes whatever this call created, so the pair is
        never left half written.
        """
        self.ensure_clean()
        files = self.render(config)

        created: list[Path] = []
        try:
            self._settings.work_dir.mkdir(parents=True, exist_ok=True)
            created.append(files.compose_path)
            files.compose_path.write_text(files.compose_descriptor, encoding="utf-8")
            created.append(files.env_path)
            _write_private(files.env_path, files.env_file)
        except OSError as e:
            for path in created:
                path.unlink(missing_ok=True)
            raise EnvironmentWriteError(
                f"Could not write environment files in {self._settings.work_dir}: "
                f"{e.strerror or e}",
                path=str(e.filename or self._settings.work_dir),
            ) from e

        self._logger.info(
            "environment_generated",
            mode=config.mode.value,
            compose_file=str(files.compose_path),
            env_file=str(files.env_path),
        )
        return files

    def unresolved_placeholders(self) -> list[str]:
        """Keys in the secret file still holding the live-mode placeholder values."""
        values = dotenv_values(self.env_path)
        placeholders = self._settings.database.placeholders
        return sorted(
            key for key, placeholder in placeholders.items() if values.get(key) == placeholder
        )


def _write_private(path: Path, content: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)


class ExistingDeploymentError(ProvisioningError):
    """Raised when descriptor or secret file already exists."""

    kind = "ExistingDeploymentError"


class EnvironmentConsistencyError(ProvisioningError):
    """Raised when the descriptor references a variable the secret file lacks."""

    kind = "EnvironmentConsistencyError"


class EnvironmentWriteError(ProvisioningError):
    """Raised when the descriptor or secret file cannot be written."""

    kind = "EnvironmentWriteError"
