"""Idempotent installation of Docker, Nginx, Certbot and the DNS tooling."""

from __future__ import annotations

from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.models.command import CommandResult
from n8n_provisioner.domain.services.base import HostService


BASE_PACKAGES = (
    "curl",
    "wget",
    "apt-transport-https",
    "ca-certificates",
    "gnupg",
    "lsb-release",
    "software-properties-common",
)
DOCKER_PACKAGES = ("docker-ce", "docker-ce-cli", "containerd.io", "docker-compose-plugin")
DOCKER_GPG_URL = "https://download.docker.com/linux/ubuntu/gpg"
DOCKER_REPO_URL = "https://download.docker.com/linux/ubuntu"
KEYRING_DIR = "/etc/apt/keyrings"
DOCKER_KEYRING = f"{KEYRING_DIR}/docker.gpg"
DOCKER_SOURCE_LIST = "/etc/apt/sources.list.d/docker.list"

# executable -> apt packages providing it
TOOL_PACKAGES: dict[str, tuple[str, ...]] = {
    "nginx": ("nginx",),
    "certbot": ("certbot", "python3-certbot-nginx"),
}
# certbot alone lacks the --nginx installer
CERTBOT_NGINX_PLUGIN = "python3-certbot-nginx"
DNS_TOOL = "dig"
DNS_TOOL_PACKAGES = ("dnsutils",)
APT_NONINTERACTIVE = "DEBIAN_FRONTEND=noninteractive"


class PrerequisiteInstaller(HostService):
    """Ensures host tooling is present, skipping anything already installed."""

    def install(self, codename: str) -> None:
        self._logger.info("prerequisites_installing")
        self._apt_update()
        self._apt_install(*BASE_PACKAGES)
        self.ensure_docker(codename)
        self.ensure_tool("nginx", TOOL_PACKAGES["nginx"])
        if not self.ensure_tool("certbot", TOOL_PACKAGES["certbot"]):
            self.ensure_package(CERTBOT_NGINX_PLUGIN)
        self.ensure_tool(DNS_TOOL, DNS_TOOL_PACKAGES)
        self._logger.info("prerequisites_installed")

    def ensure_dns_tool(self) -> None:
        """Install ``dig`` when missing; runs on resumed deployments as well."""
        if self._installed(DNS_TOOL):
            return
        self._apt_update()
        self.ensure_tool(DNS_TOOL, DNS_TOOL_PACKAGES)

    def ensure_tool(self, executable: str, packages: tuple[str, ...]) -> bool:
        """Install ``packages`` unless ``executable`` is on PATH. Returns True if installed now."""
        if self._installed(executable):
            self._logger.info("prerequisite_present", tool=executable)
            return False
        self._logger.info("prerequisite_installing", tool=executable, packages=list(packages))
        self._apt_install(*packages)
        return True

    def ensure_package(self, package: str) -> bool:
        """Install ``package`` unless dpkg reports it installed. Returns True if installed now."""
        if self._package_installed(package):
            self._logger.info("prerequisite_present", package=package)
            return False
        self._logger.info("prerequisite_installing", packages=[package])
        self._apt_install(package)
        return True

    def ensure_docker(self, codename: str) -> bool:
        if self._installed("docker"):
            self._logger.info("prerequisite_present", tool="docker")
            return False
        if not codename:
            raise PrerequisiteInstallError(
                "Cannot configure the Docker apt repository: unknown Ubuntu release codename.",
            )

        self._logger.info("prerequisite_installing", tool="docker", packages=list(DOCKER_PACKAGES))
        self._check(
            self._sudo("install", "-m", "0755", "-d", KEYRING_DIR), "create apt keyring dir"
        )
        key = self._check(self._run(["curl", "-fsSL", DOCKER_GPG_URL]), "download Docker GPG key")
        self._check(
            self._sudo(
                "gpg", "--batch", "--yes", "--dearmor", "-o", DOCKER_KEYRING, input_text=key.stdout
            ),
            "import Docker GPG key",
        )
        self._check(self._sudo("chmod", "a+r", DOCKER_KEYRING), "set Docker key permissions")

        arch = self._check(self._run(["dpkg", "--print-architecture"]), "detect architecture")
        source = (
            f"deb [arch={arch.stdout.strip()} signed-by={DOCKER_KEYRING}] "
            f"{DOCKER_REPO_URL} {codename} stable\n"
        )
        self._check(
            self._sudo("tee", DOCKER_SOURCE_LIST, input_text=source), "add Docker apt source"
        )

        self._apt_update()
        self._apt_install(*DOCKER_PACKAGES)
        self._check(self._sudo("systemctl", "start", "docker"), "start Docker")
        self._check(self._sudo("systemctl", "enable", "docker"), "enable Docker")
        return True

    def _package_installed(self, package: str) -> bool:
        result = self._run(["dpkg-query", "-W", "-f=${Status}", package])
        return result.ok and "install ok installed" in result.stdout

    def _apt_update(self) -> None:
        self._check(self._sudo("apt-get", "update", "-y"), "update package index")

    def _apt_install(self, *packages: str) -> None:
        self._check(
            self._sudo("env", APT_NONINTERACTIVE, "apt-get", "install", "-y", *packages),
            f"install {' '.join(packages)}",
        )

    def _check(self, result: CommandResult, label: str) -> CommandResult:
        if not result.ok:
            raise PrerequisiteInstallError(
                f"Failed to {label}: {result.detail or f'exit code {result.returncode}'}",
                command=result.rendered,
                returncode=result.returncode,
            )
        return result


class PrerequisiteInstallError(ProvisioningError):
    """Raised when a package or repository setup command fails."""

    kind = "PrerequisiteInstallError"
