"""Maps transport results and decoded replies onto resolution outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from claimbroker.domain.errors import RegistryError, TransportError
from claimbroker.domain.model import (
    AckStatus,
    Error,
    ErrorCause,
    Found,
    NotFound,
    RegistryReply,
)

if TYPE_CHECKING:
    from claimbroker.domain.model import ResolutionOutcome


def classify(result: RegistryReply | TransportError) -> ResolutionOutcome:
    """Classify a search result.

    Unrecognized acknowledgement codes are server errors, never a match.
    """

    if isinstance(result, TransportError):
        return transport_error(result)
    error = acknowledgement_error(result)
    if error is not None:
        return error
    if result.profile is None:
        return NotFound()
    return Found(result.profile)


def transport_error(exc: TransportError) -> Error:
    return Error(ErrorCause.TRANSPORT_FAILURE, detail=str(exc))


def acknowledgement_error(reply: RegistryReply) -> Error | None:
    """Return the error a non-success acknowledgement stands for, if any."""

    match reply.ack:
        case AckStatus.SUCCESS:
            return None
        case AckStatus.FAILURE:
            return Error(
                ErrorCause.SERVER_ERROR,
                detail=f"Registry reported an internal failure ({reply.ack_code})",
            )
        case AckStatus.INVALID_REQUEST:
            return Error(
                ErrorCause.INVALID_REQUEST,
                detail=f"Registry rejected the request as invalid ({reply.ack_code})",
            )
        case _:
            return Error(
                ErrorCause.SERVER_ERROR,
                detail=f"Unrecognized acknowledgement code: {reply.ack_code!r}",
            )


def as_exception(error: Error) -> RegistryError:
    return RegistryError(error.cause, error.detail or None)
