"""Host operating system detection."""

from __future__ import annotations

from pathlib import Path

from n8n_provisioner.domain.models.base import ProvisioningError, ValueObject


SUPPORTED_OS_ID = "ubuntu"


class HostPlatform(ValueObject):
    """Subset of ``os-release`` fields the installer needs."""

    id: str
    version_id: str = ""
    version_codename: str = ""
    pretty_name: str = ""


def parse_os_release(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        data[key.strip()] = value.strip().strip('"').strip("'")
    return data


def detect_platform(os_release_path: Path) -> HostPlatform:
    """Read ``os-release`` and require an Ubuntu host."""
    try:
        text = Path(os_release_path).read_text(encoding="utf-8")
    except OSError as e:
        raise UnsupportedPlatformError(
            f"Cannot read {os_release_path}: this installer only supports Ubuntu.",
            path=str(os_release_path),
        ) from e

    data = parse_os_release(text)
    os_id = data.get("ID", "").lower()
    if os_id != SUPPORTED_OS_ID:
        raise UnsupportedPlatformError(
            f"Unsupported operating system '{os_id or 'unknown'}': "
            "this installer only supports Ubuntu.",
            detected=os_id or "unknown",
        )

    return HostPlatform(
        id=os_id,
        version_id=data.get("VERSION_ID", ""),
        version_codename=data.get("VERSION_CODENAME") or data.get("UBUNTU_CODENAME", ""),
        pretty_name=data.get("PRETTY_NAME", ""),
    )


class UnsupportedPlatformError(ProvisioningError):
    """Raised when the host is not a supported Ubuntu system."""

    kind = "UnsupportedPlatform"
