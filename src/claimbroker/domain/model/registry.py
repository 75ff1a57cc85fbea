"""Typed request/response values exchanged with the registry ports."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import AckStatus, RequestKind
from .profile import IdentifierCodes, Profile
from .subject import Subject  # noqa: TC001


@dataclass(frozen=True, slots=True)
class RegistryRequest:
    kind: RequestKind
    subject: Subject


@dataclass(frozen=True, slots=True)
class RawResponse:
    status_code: int
    body: bytes

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True, slots=True, kw_only=True)
class RegistryReply:
    """Decoded registry answer; the only shape the domain sees."""

    ack: AckStatus
    ack_code: str | None = None
    profile: Profile | None = None
    identifier_codes: IdentifierCodes = field(default_factory=IdentifierCodes)

    @property
    def failed_or_invalid(self) -> bool:
        return self.ack in {AckStatus.FAILURE, AckStatus.INVALID_REQUEST}
