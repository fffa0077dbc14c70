"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog
from structlog.testing import LogCapture

from n8n_provisioner.config import ProvisionerSettings, ProxySettings
from n8n_provisioner.domain.models.deployment import DeploymentConfig, DeploymentMode

from fakes import FakeCommandRunner, PUBLIC_IP


UBUNTU_OS_RELEASE = """\
PRETTY_NAME="Ubuntu 22.04.4 LTS"
NAME="Ubuntu"
VERSION_ID="22.04"
VERSION_CODENAME=jammy
ID=ubuntu
ID_LIKE=debian
UBUNTU_CODENAME=jammy
"""


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "deploy"
    path.mkdir()
    return path


@pytest.fixture
def os_release(tmp_path: Path) -> Path:
    path = tmp_path / "os-release"
    path.write_text(UBUNTU_OS_RELEASE, encoding="utf-8")
    return path


@pytest.fixture
def settings(work_dir: Path, os_release: Path, tmp_path: Path) -> ProvisionerSettings:
    return ProvisionerSettings(
        work_dir=work_dir,
        os_release_path=os_release,
        proxy=ProxySettings(
            sites_available=tmp_path / "sites-available",
            sites_enabled=tmp_path / "sites-enabled",
        ),
    )


@pytest.fixture
def runner() -> FakeCommandRunner:
    """A host with every tool installed and DNS pointing at it."""
    fake = FakeCommandRunner(installed=["docker", "nginx", "certbot", "dig", "curl"])
    fake.on("curl", "-4", stdout=f"{PUBLIC_IP}\n")
    fake.on("dig", stdout=f"{PUBLIC_IP}\n")
    fake.on("dpkg-query", stdout="install ok installed")
    return fake


@pytest.fixture
def log_capture() -> LogCapture:
    return LogCapture()


@pytest.fixture
def logger(log_capture: LogCapture) -> structlog.BoundLogger:
    return structlog.wrap_logger(
        structlog.PrintLogger(),
        processors=[log_capture],
        wrapper_class=structlog.BoundLogger,
    )


@pytest.fixture
def dev_config() -> DeploymentConfig:
    return DeploymentConfig(domain="dev.example.com", email="a@b.com", mode=DeploymentMode.DEV)


@pytest.fixture
def live_config() -> DeploymentConfig:
    return DeploymentConfig(domain="n8n.example.com", email="a@b.com", mode=DeploymentMode.LIVE)
