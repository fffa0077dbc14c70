"""Domain models package."""

from n8n_provisioner.domain.models.base import ProvisioningError, utc_now, ValueObject
from n8n_provisioner.domain.models.command import CommandResult
from n8n_provisioner.domain.models.deployment import (
    DeploymentConfig,
    DeploymentMode,
    DeploymentPhase,
    EnvironmentFiles,
    EnvironmentState,
    PHASE_ORDER,
    PhaseResult,
    RunOutcome,
    RunReport,
    SETUP_PHASES,
)


__all__ = [
    "CommandResult",
    "DeploymentConfig",
    "DeploymentMode",
    "DeploymentPhase",
    "EnvironmentFiles",
    "EnvironmentState",
    "PHASE_ORDER",
    "PhaseResult",
    "ProvisioningError",
    "RunOutcome",
    "RunReport",
    "SETUP_PHASES",
    "ValueObject",
    "utc_now",
]
