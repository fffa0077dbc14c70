"""Input validation for domain, email and deployment mode."""

from __future__ import annotations

import re

from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.models.deployment import DeploymentConfig, DeploymentMode


_DOMAIN_PATTERN = re.compile(r"^[A-Za-z0-9.-]+$")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_domain(value: str | None) -> str:
    """Accept ``[A-Za-z0-9.-]+`` containing at least one dot. No IDNA handling."""
    if not value or not _DOMAIN_PATTERN.match(value) or "." not in value:
        raise InvalidArgumentError(
            f"Invalid or missing domain: {value!r}. Use --domain=\"your-domain.com\"",
            field="domain",
            value=value or "",
        )
    return value


def validate_email(value: str | None) -> str:
    """Loose ``local@domain.tld`` shape check, not RFC 5322."""
    if not value or not _EMAIL_PATTERN.match(value):
        raise InvalidArgumentError(
            f"Invalid or missing email: {value!r}. Use --email=\"your-email@example.com\"",
            field="email",
            value=value or "",
        )
    return value


def validate_mode(value: str | DeploymentMode | None) -> DeploymentMode:
    if isinstance(value, DeploymentMode):
        return value
    try:
        return DeploymentMode(value)
    except ValueError as e:
        raise InvalidModeError(
            f"Invalid mode: {value!r}. Use --mode=\"dev\" or --mode=\"live\"",
            field="mode",
            value=str(value),
        ) from e


def build_config(
    domain: str | None, email: str | None, mode: str | DeploymentMode | None = DeploymentMode.DEV
) -> DeploymentConfig:
    """Validate raw inputs, failing on the first offending field."""
    return DeploymentConfig(
        domain=validate_domain(domain),
        email=validate_email(email),
        mode=validate_mode(mode),
    )


class InvalidArgumentError(ProvisioningError):
    """Raised for a malformed domain, email, mode or command-line flag."""

    kind = "InvalidArgument"


class InvalidModeError(InvalidArgumentError):
    """Raised when the mode is neither ``dev`` nor ``live``."""

    kind = "InvalidMode"
