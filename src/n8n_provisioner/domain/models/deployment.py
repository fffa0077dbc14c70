"""Deployment configuration, phase results and the run report."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import Field, SecretStr

from n8n_provisioner.domain.models.base import ProvisioningError, utc_now, ValueObject


class DeploymentMode(str, Enum):
    """Deployment topologies."""

    DEV = "dev"
    LIVE = "live"


class DeploymentPhase(str, Enum):
    """Ordered phases of a provisioning run."""

    VALIDATE = "validate"
    INSTALL_PREREQUISITES = "install_prerequisites"
    GENERATE_ENVIRONMENT = "generate_environment"
    VERIFY_DNS = "verify_dns"
    START_CONTAINERS = "start_containers"
    CONFIGURE_PROXY_AND_TLS = "configure_proxy_and_tls"


PHASE_ORDER: tuple[DeploymentPhase, ...] = tuple(DeploymentPhase)

SETUP_PHASES: frozenset[DeploymentPhase] = frozenset({
    DeploymentPhase.INSTALL_PREREQUISITES,
    DeploymentPhase.GENERATE_ENVIRONMENT,
})


class EnvironmentState(str, Enum):
    """On-disk state of the descriptor/secret file pair."""

    CLEAN = "clean"
    COMPLETE = "complete"
    PARTIAL = "partial"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    HALTED = "halted"
    FAILED = "failed"


class DeploymentConfig(ValueObject):
    """Validated input for one provisioning run."""

    domain: str
    email: str
    mode: DeploymentMode = DeploymentMode.DEV
    db_password: SecretStr | None = None

    @property
    def webhook_url(self) -> str:
        return f"https://{self.domain}/"

    @property
    def public_url(self) -> str:
        return f"https://{self.domain}"


class EnvironmentFiles(ValueObject):
    """The generated descriptor and secret file, written together as a unit.

    ``config`` is the input config with any generated database password filled in.
    """

    config: DeploymentConfig
    compose_path: Path
    env_path: Path
    compose_descriptor: str
    env_file: str = Field(repr=False)


class PhaseResult(ValueObject):
    """Outcome of a single phase. Never persisted."""

    phase: DeploymentPhase
    success: bool
    skipped: bool = False
    reason: str = ""
    error_kind: str | None = None
    details: dict[str, str] = Field(default_factory=dict)
    finished_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def ok(cls, phase: DeploymentPhase) -> PhaseResult:
        return cls(phase=phase, success=True)

    @classmethod
    def skip(cls, phase: DeploymentPhase, reason: str) -> PhaseResult:
        return cls(phase=phase, success=True, skipped=True, reason=reason)

    @classmethod
    def failure(cls, phase: DeploymentPhase, error: ProvisioningError) -> PhaseResult:
        return cls(
            phase=phase,
            success=False,
            reason=error.message,
            error_kind=error.kind,
            details={key: str(value) for key, value in error.details.items()},
        )


class RunReport(ValueObject):
    """Ordered record of a provisioning run."""

    mode: DeploymentMode
    outcome: RunOutcome
    results: list[PhaseResult] = Field(default_factory=list)
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome != RunOutcome.FAILED

    @property
    def setup_skipped(self) -> bool:
        return any(r.skipped for r in self.results if r.phase in SETUP_PHASES)

    @property
    def executed_phases(self) -> list[DeploymentPhase]:
        return [r.phase for r in self.results if not r.skipped]

    @property
    def failed_result(self) -> PhaseResult | None:
        for result in self.results:
            if not result.success:
                return result
        return None

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1
