"""Identity resolution error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from claimbroker.domain.model import ErrorCause


class IdentityError(RuntimeError):
    """Base class for identity resolution failures."""


class TransportError(IdentityError):
    """Raised by a registry transport when no usable reply came back."""

    def __init__(
        self,
        message: str,
        *,
        timeout: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout = timeout
        self.status_code = status_code


class RegistryError(IdentityError):
    """A classified registry failure surfaced to callers."""

    def __init__(self, cause: ErrorCause, message: str | None = None) -> None:
        super().__init__(message or f"Registry call failed: {cause}")
        self.cause = cause


class InconsistentIdentityError(IdentityError):
    """Raised when a subject's existing identifiers contradict each other."""
