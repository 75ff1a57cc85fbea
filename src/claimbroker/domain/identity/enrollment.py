"""Find-or-create workflow for registry records."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from claimbroker.domain.errors import InconsistentIdentityError
from claimbroker.domain.model import (
    Error,
    Found,
    IdentifierCodes,
    NotFound,
    Profile,
    RegistryRequest,
    RequestKind,
)
from claimbroker.domain.ports.observability import EventKind, NullEventSink

from .classification import as_exception

if TYPE_CHECKING:
    from claimbroker.domain.model import Subject
    from claimbroker.domain.ports import EventSink

    from .resolution import ResolutionClient

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AlreadyPresent:
    profile: Profile


@dataclass(frozen=True, slots=True)
class Enrolled:
    codes: IdentifierCodes
    profile: Profile


type EnrollmentResult = AlreadyPresent | Enrolled | Error


class EnrollmentOrchestrator:
    """Resolve a subject and enroll them when the registry has no record.

    The two phases are not atomic together. Two orchestrations racing on the
    same new subject can both enroll; the local cache still ends with a single
    entry for the key (last write wins).
    """

    def __init__(self, *, resolver: ResolutionClient, sink: EventSink | None = None) -> None:
        self._resolver = resolver
        self._sink = sink or NullEventSink()

    def ensure_enrolled(self, subject: Subject) -> EnrollmentResult:
        _check_consistency(subject)

        outcome = self._resolver.resolve(subject)
        match outcome:
            case Found(profile):
                return AlreadyPresent(profile)
            case Error():
                log.warning("Not enrolling after failed search: %s", outcome.cause)
                return outcome
            case NotFound():
                pass

        key = self._resolver.cache_key(subject)
        self._sink.emit(EventKind.ENROLLMENT_SUBMITTED, key)
        reply = self._resolver.exchange(RegistryRequest(RequestKind.ENROLL, subject), key=key)
        if isinstance(reply, Error):
            return reply

        codes = reply.identifier_codes
        profile = Profile(identifiers=codes.ids)
        if codes.ids:
            self._resolver.cache_outcome(subject, Found(profile))
        else:
            # nothing recognizable came back; let the next search pick up the new record
            log.warning(
                "Enrollment for %s returned no recognized identifiers: %s", key, codes.other
            )
            self._resolver.forget(subject)
        log.info("Enrolled %s with %s", key, ", ".join(str(kind) for kind in codes.ids))
        return Enrolled(codes=codes, profile=profile)


def unwrap_enrollment(result: EnrollmentResult) -> AlreadyPresent | Enrolled:
    """Return a successful result or raise the classified error."""

    if isinstance(result, Error):
        raise as_exception(result)
    return result


def _check_consistency(subject: Subject) -> None:
    if subject.participant_id and not subject.birls_id:
        raise InconsistentIdentityError("No birls_id while participant_id present")
