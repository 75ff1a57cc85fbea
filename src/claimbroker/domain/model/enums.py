"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class IdentifierKind(StrEnum):
    """Cross-system identifiers the registry correlates for a person."""

    ICN = "icn"
    EDIPI = "edipi"
    BIRLS_ID = "birls_id"
    PARTICIPANT_ID = "participant_id"
    MHV_CORRELATION_ID = "mhv_correlation_id"
    VA_PROFILE_ID = "vet360_id"
    SEC_ID = "sec_id"


class OutcomeKind(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class ErrorCause(StrEnum):
    TRANSPORT_FAILURE = "transport_failure"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"

    @property
    def is_retryable(self) -> bool:
        """Transport failures and registry-side server errors may succeed on another try."""
        return self is not ErrorCause.INVALID_REQUEST


class AckStatus(StrEnum):
    """Registry acknowledgement status, decoupled from the wire codes."""

    SUCCESS = "success"
    FAILURE = "failure"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"


class RequestKind(StrEnum):
    SEARCH = "search"
    ENROLL = "enroll"
