"""Deployment orchestration: validate, set up, verify DNS, deploy, proxy and TLS."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import structlog

from n8n_provisioner.config import ProvisionerSettings
from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.models.deployment import (
    DeploymentConfig,
    DeploymentMode,
    DeploymentPhase,
    EnvironmentState,
    PhaseResult,
    RunOutcome,
    RunReport,
)
from n8n_provisioner.domain.ports.services import CommandRunner
from n8n_provisioner.domain.services.containers import ContainerLauncher
from n8n_provisioner.domain.services.dns import DnsVerifier
from n8n_provisioner.domain.services.environment import EnvironmentGenerator
from n8n_provisioner.domain.services.prerequisites import PrerequisiteInstaller
from n8n_provisioner.domain.services.proxy import ProxyConfigurator
from n8n_provisioner.domain.services.validation import build_config
from n8n_provisioner.infrastructure.system.platform import detect_platform, HostPlatform


T = TypeVar("T")

LIVE_HALT_MESSAGE = (
    "Production '{env_file}' created with placeholder database credentials. "
    "Edit DB_HOST, DB_PORT, DB_USER, DB_PASSWORD and DB_DATABASE, then re-run the "
    "same command to continue with DNS verification and deployment."
)


class DeploymentOrchestrator:
    """Runs the provisioning phases in order and stops at the first failure.

    Phase sequence::

        validate -> (install_prerequisites -> generate_environment)?
                 -> verify_dns -> start_containers -> configure_proxy_and_tls

    The bracketed setup phases are skipped when both environment files are
    already on disk, which is how a live deployment resumes after the
    operator has filled in the database credentials. Nothing is rolled back
    on failure.
    """

    def __init__(
        self,
        settings: ProvisionerSettings,
        runner: CommandRunner,
        logger: Any | None = None,
        *,
        installer: PrerequisiteInstaller | None = None,
        generator: EnvironmentGenerator | None = None,
        dns_verifier: DnsVerifier | None = None,
        containers: ContainerLauncher | None = None,
        proxy: ProxyConfigurator | None = None,
        platform_detector: Callable[[Path], HostPlatform] = detect_platform,
    ) -> None:
        self._settings = settings
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._installer = installer or PrerequisiteInstaller(runner, settings, self._logger)
        self._generator = generator or EnvironmentGenerator(settings, self._logger)
        self._dns = dns_verifier or DnsVerifier(runner, settings, self._logger)
        self._containers = containers or ContainerLauncher(runner, settings, self._logger)
        self._proxy = proxy or ProxyConfigurator(runner, settings, self._logger)
        self._detect_platform = platform_detector

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _phase(
        self, phase: DeploymentPhase, action: Callable[[], T]
    ) -> tuple[PhaseResult, T | None]:
        log = self._logger.bind(phase=phase.value)
        log.info("phase_started")
        try:
            value = action()
        except ProvisioningError as e:
            log.error("phase_failed", error_kind=e.kind, error=e.message, **e.details)
            return PhaseResult.failure(phase, e), None
        log.info("phase_completed")
        return PhaseResult.ok(phase), value

    def _validate(
        self, domain: str | None, email: str | None, mode: str | DeploymentMode | None
    ) -> tuple[DeploymentConfig, HostPlatform, EnvironmentState]:
        config = build_config(domain, email, mode)
        self._logger.info(
            "inputs_validated", domain=config.domain, email=config.email, mode=config.mode.value
        )
        platform = self._detect_platform(self._settings.os_release_path)
        self._logger.info("platform_detected", os=platform.pretty_name or platform.id)

        state = self._generator.inspect()
        if state == EnvironmentState.PARTIAL:
            # exactly one of the pair exists: never guess which deployment it belongs to
            self._generator.ensure_clean()
        return config, platform, state

    def _verify_dns(self, config: DeploymentConfig) -> str:
        self._installer.ensure_dns_tool()
        return self._dns.verify(config.domain)

    @staticmethod
    def _report(
        mode: DeploymentMode,
        outcome: RunOutcome,
        results: list[PhaseResult],
        message: str = "",
    ) -> RunReport:
        return RunReport(mode=mode, outcome=outcome, results=list(results), message=message)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def provision(
        self,
        domain: str | None,
        email: str | None,
        mode: str | DeploymentMode | None = DeploymentMode.DEV,
    ) -> RunReport:
        """Run every phase; the returned report says how far the run got."""
        results: list[PhaseResult] = []
        try:
            requested_mode = DeploymentMode(mode)
        except ValueError:
            requested_mode = DeploymentMode.DEV

        result, validated = self._phase(
            DeploymentPhase.VALIDATE, lambda: self._validate(domain, email, mode)
        )
        results.append(result)
        if validated is None:
            return self._report(requested_mode, RunOutcome.FAILED, results, result.reason)
        config, platform, state = validated

        if state == EnvironmentState.COMPLETE:
            reason = "environment files already present; resuming deployment"
            self._logger.info("setup_skipped", reason=reason)
            results.append(PhaseResult.skip(DeploymentPhase.INSTALL_PREREQUISITES, reason))
            results.append(PhaseResult.skip(DeploymentPhase.GENERATE_ENVIRONMENT, reason))
            if config.mode == DeploymentMode.LIVE:
                self._warn_placeholders()
        else:
            result, _ = self._phase(
                DeploymentPhase.INSTALL_PREREQUISITES,
                lambda: self._installer.install(platform.version_codename),
            )
            results.append(result)
            if not result.success:
                return self._report(config.mode, RunOutcome.FAILED, results, result.reason)

            result, files = self._phase(
                DeploymentPhase.GENERATE_ENVIRONMENT, lambda: self._generator.generate(config)
            )
            results.append(result)
            if files is None:
                return self._report(config.mode, RunOutcome.FAILED, results, result.reason)
            config = files.config

            if config.mode == DeploymentMode.LIVE:
                message = LIVE_HALT_MESSAGE.format(env_file=self._settings.env_path)
                self._logger.warning(
                    "live_credentials_required", env_file=str(self._settings.env_path)
                )
                return self._report(config.mode, RunOutcome.HALTED, results, message)

        for phase, action in (
            (DeploymentPhase.VERIFY_DNS, lambda: self._verify_dns(config)),
            (DeploymentPhase.START_CONTAINERS, self._containers.start),
            (DeploymentPhase.CONFIGURE_PROXY_AND_TLS, lambda: self._proxy.configure(config)),
        ):
            result, _ = self._phase(phase, action)
            results.append(result)
            if not result.success:
                return self._report(config.mode, RunOutcome.FAILED, results, result.reason)

        self._logger.info(
            "installation_complete",
            url=config.public_url,
            compose_file=str(self._settings.compose_path),
            env_file=str(self._settings.env_path),
            manage="sudo docker compose [up|down|logs]",
        )
        return self._report(
            config.mode, RunOutcome.COMPLETED, results, f"n8n is available at {config.public_url}"
        )

    def _warn_placeholders(self) -> None:
        unresolved = self._generator.unresolved_placeholders()
        if unresolved:
            self._logger.warning(
                "live_placeholders_unresolved",
                env_file=str(self._settings.env_path),
                keys=unresolved,
            )
