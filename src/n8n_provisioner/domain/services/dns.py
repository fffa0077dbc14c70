"""DNS verification: the domain's A record must point at this host."""

from __future__ import annotations

import ipaddress

from n8n_provisioner.domain.models.base import ProvisioningError
from n8n_provisioner.domain.services.base import HostService


def extract_ipv4(text: str) -> list[str]:
    """IPv4 addresses from command output, in order; CNAME lines are skipped."""
    found: list[str] = []
    for token in (text or "").split():
        try:
            address = ipaddress.ip_address(token.strip())
        except ValueError:
            continue
        if address.version == 4:
            found.append(str(address))
    return found


class DnsVerifier(HostService):
    """Single-shot comparison of the public IPv4 address and the domain's A record.

    There is no retry: a propagation delay is reported to the operator.
    """

    def public_ip(self) -> str:
        url = self._settings.dns.ip_lookup_url
        result = self._run(["curl", "-4", "-s", "--fail", url])
        addresses = extract_ipv4(result.stdout) if result.ok else []
        if not addresses:
            raise DnsLookupError(
                f"Could not determine this server's public IP address via {url}.",
                service=url,
                detail=result.detail,
            )
        return addresses[0]

    def resolve_a(self, domain: str) -> str:
        result = self._run(["dig", "+short", domain, "A"])
        addresses = extract_ipv4(result.stdout) if result.ok else []
        if not addresses:
            raise DnsLookupError(
                f"Domain '{domain}' has no resolvable A record. "
                "Please create one pointing at this server.",
                domain=domain,
                detail=result.detail,
            )
        return addresses[0]

    def verify(self, domain: str) -> str:
        """Return the verified address, or raise on lookup failure or mismatch."""
        self._logger.info("dns_verifying", domain=domain)
        server_ip = self.public_ip()
        domain_ip = self.resolve_a(domain)
        if server_ip != domain_ip:
            raise DnsMismatchError(domain=domain, expected=server_ip, actual=domain_ip)
        self._logger.info("dns_verified", domain=domain, address=server_ip)
        return server_ip


class DnsLookupError(ProvisioningError):
    """Raised when the public IP or the domain's A record cannot be resolved."""

    kind = "DnsLookupError"


class DnsMismatchError(ProvisioningError):
    """Raised when the domain resolves somewhere other than this host."""

    kind = "DnsMismatchError"

    def __init__(self, domain: str, expected: str, actual: str) -> None:
        super().__init__(
            f"DNS mismatch: domain '{domain}' points to '{actual}', but this server's IP "
            f"is '{expected}'. Please fix your DNS A record.",
            domain=domain,
            expected=expected,
            actual=actual,
        )
        self.expected = expected
        self.actual = actual
