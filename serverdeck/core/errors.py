"""Shared error types.

The goal is to make errors explicit and easy to handle at the UI boundary.
None of them is fatal: each is either shown inline or recovered silently.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(eq=False)
class AppError(Exception):
    """Base error for application-level failures."""

    message: str
    cause: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.cause is None:
            return self.message
        return f"{self.message} (cause: {self.cause})"


class ValidationError(AppError):
    """Invalid user input or configuration."""


class InfrastructureError(AppError):
    """IO/OS/network failures."""


class ConfigCorruption(InfrastructureError):
    """Persisted JSON could not be parsed; callers fall back to empty defaults."""


class ValidationReason(str, Enum):
    BASIC_AUTH = "basic-auth"
    INVALID = "invalid"
    TIMEOUT = "timeout"


class HostValidationError(ValidationError):
    """Host check failed. ``reason`` tells the add-server form what to show."""

    def __init__(self, reason: ValidationReason | str, cause: Exception | None = None) -> None:
        self.reason = ValidationReason(reason)
        super().__init__(message=f"Host validation failed: {self.reason.value}", cause=cause)


class ContentLoadFailure(AppError):
    """Main-frame navigation failed or the server answered with a 5xx status."""


class CertificateTrustDenied(AppError):
    """The user declined an untrusted certificate."""
