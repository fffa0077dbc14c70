"""Base domain model classes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class ValueObject(BaseModel):
    """Base class for value objects (immutable)."""

    model_config = {"frozen": True}


class ProvisioningError(Exception):
    """Base class for every error that aborts a provisioning run.

    ``kind`` names the failure category reported to the operator and
    ``details`` carries structured values (e.g. conflicting addresses) that
    are attached to the diagnostic log line.
    """

    kind: str = "ProvisioningError"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
