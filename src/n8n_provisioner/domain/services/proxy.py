"""Nginx reverse proxy site and Let's Encrypt certificate issuance."""

from __future__ import annotations

from pathlib import Path

from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.models.command import CommandResult
from n8n_provisioner.domain.models.deployment import DeploymentConfig
from n8n_provisioner.domain.services.base import HostService
from n8n_provisioner.infrastructure.templates.nginx import render_site


class ProxyConfigurator(HostService):
    """Writes and enables the site, validates it, then asks certbot for a certificate."""

    def site_paths(self, domain: str) -> tuple[Path, Path]:
        proxy = self._settings.proxy
        return proxy.sites_available / domain, proxy.sites_enabled / domain

    def configure(self, config: DeploymentConfig) -> None:
        self.write_site(config.domain)
        self.enable_site(config.domain)
        self.test_config()
        self.reload()
        self.issue_certificate(config)
        # certbot rewrites the site; make sure those edits are live
        self.reload()
        self._logger.info("proxy_configured", domain=config.domain, url=config.public_url)

    def write_site(self, domain: str) -> Path:
        available, _ = self.site_paths(domain)
        content = render_site(domain, self._settings.app, self._settings.proxy)
        self._logger.info("proxy_site_writing", path=str(available))
        written = self._sudo("tee", str(available), input_text=content)
        self._check(written, "write site configuration")
        return available

    def enable_site(self, domain: str) -> None:
        """Link the site into sites-enabled and drop the distribution default site."""
        available, enabled = self.site_paths(domain)
        self._check(self._sudo("ln", "-sf", str(available), str(enabled)), "enable site")
        default = self._settings.proxy.sites_enabled / self._settings.proxy.default_site
        self._check(self._sudo("rm", "-f", str(default)), "disable default site")

    def test_config(self) -> None:
        result = self._sudo("nginx", "-t")
        if not result.ok:
            raise ProxyConfigError(
                f"Nginx configuration test failed: {result.detail}",
                command=result.rendered,
            )

    def reload(self) -> None:
        self._check(self._sudo("systemctl", "reload-or-restart", "nginx"), "reload nginx")

    def issue_certificate(self, config: DeploymentConfig) -> None:
        self._logger.info("certificate_requesting", domain=config.domain, email=config.email)
        result = self._sudo(
            "certbot",
            "--nginx",
            "--agree-tos",
            "--redirect",
            "--hsts",
            "--staple-ocsp",
            "--email",
            config.email,
            "-d",
            config.domain,
            "--non-interactive",
        )
        if not result.ok:
            raise CertificateIssuanceError(
                f"Certbot failed to obtain a certificate for {config.domain}: {result.detail}",
                domain=config.domain,
            )
        self._logger.info("certificate_issued", domain=config.domain)

    def _check(self, result: CommandResult, label: str) -> CommandResult:
        if not result.ok:
            raise ProxyConfigError(
                f"Failed to {label}: {result.detail or f'exit code {result.returncode}'}",
                command=result.rendered,
            )
        return result


class ProxyConfigError(ProvisioningError):
    """Raised when the site cannot be written, enabled, validated or reloaded."""

    kind = "ProxyConfigError"


class CertificateIssuanceError(ProvisioningError):
    """Raised when certbot fails to issue or install the certificate."""

    kind = "CertificateIssuanceError"
