from __future__ import annotations

import pytest

from claimbroker.domain.errors import InconsistentIdentityError, RegistryError
from claimbroker.domain.identity import (
    AlreadyPresent,
    Enrolled,
    EnrollmentOrchestrator,
    ResolutionClient,
    unwrap_enrollment,
)
from claimbroker.domain.model import (
    Error,
    ErrorCause,
    Found,
    IdentifierKind,
    NotFound,
    Profile,
    RawResponse,
    RequestKind,
    Subject,
)
from claimbroker.domain.ports import EventKind
from tests.helpers.identity import (
    FakeRegistryTransport,
    RecordingEventSink,
    add_person_body,
    make_subject,
    mpi_response,
)


def test_found_subject_is_never_enrolled(
    orchestrator: EnrollmentOrchestrator,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_response.xml"))

    result = orchestrator.ensure_enrolled(subject)

    assert isinstance(result, AlreadyPresent)
    assert result.profile.icn == "1008714701V416111"
    assert [request.kind for request in transport.requests] == [RequestKind.SEARCH]


def test_new_subject_is_enrolled_and_cached(
    orchestrator: EnrollmentOrchestrator,
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    sink: RecordingEventSink,
) -> None:
    jane = make_subject(given_names=("Jane",), family_name="Doe", ssn="123456789")
    transport.queue(
        mpi_response("find_profile_not_found_response.xml"),
        RawResponse(200, add_person_body("BRLS555000", "CORP777000")),
    )

    result = orchestrator.ensure_enrolled(jane)

    assert isinstance(result, Enrolled)
    assert result.codes.as_dict() == {"birls_id": "555000", "participant_id": "777000"}
    assert [request.kind for request in transport.requests] == [
        RequestKind.SEARCH,
        RequestKind.ENROLL,
    ]
    assert EventKind.ENROLLMENT_SUBMITTED in sink.kinds()

    outcome = resolver.resolve(jane)

    assert isinstance(outcome, Found)
    assert dict(outcome.profile.identifiers) == {
        IdentifierKind.BIRLS_ID: "555000",
        IdentifierKind.PARTICIPANT_ID: "777000",
    }
    assert transport.calls == 2


def test_search_error_stops_before_enrollment(
    orchestrator: EnrollmentOrchestrator,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_invalid_response.xml"))

    result = orchestrator.ensure_enrolled(subject)

    assert result == Error(ErrorCause.INVALID_REQUEST)
    assert transport.calls == 1


def test_failed_creation_is_propagated_and_not_cached(
    orchestrator: EnrollmentOrchestrator,
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(
        mpi_response("find_profile_not_found_response.xml"),
        *(mpi_response("add_person_failure_response.xml") for _ in range(3)),
    )

    result = orchestrator.ensure_enrolled(subject)

    assert result == Error(ErrorCause.SERVER_ERROR)
    entry = resolver._cache.get(resolver.cache_key(subject))  # noqa: SLF001
    assert entry is not None
    assert entry.outcome == NotFound()


def test_enrollment_without_recognized_codes_forgets_the_key(
    orchestrator: EnrollmentOrchestrator,
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(
        mpi_response("find_profile_not_found_response.xml"),
        RawResponse(200, add_person_body("XYZ999")),
    )

    result = orchestrator.ensure_enrolled(subject)

    assert isinstance(result, Enrolled)
    assert result.codes.as_dict() == {"other": ["XYZ999"]}
    assert resolver._cache.get(resolver.cache_key(subject)) is None  # noqa: SLF001


def test_participant_id_without_birls_id_is_inconsistent(
    orchestrator: EnrollmentOrchestrator,
    transport: FakeRegistryTransport,
) -> None:
    with pytest.raises(InconsistentIdentityError):
        orchestrator.ensure_enrolled(make_subject(participant_id="600061742"))

    assert transport.calls == 0


def test_unwrap_enrollment() -> None:
    present = AlreadyPresent(Profile(given_names=("Jane",)))

    assert unwrap_enrollment(present) is present
    with pytest.raises(RegistryError) as exc:
        unwrap_enrollment(Error(ErrorCause.TRANSPORT_FAILURE))
    assert exc.value.cause is ErrorCause.TRANSPORT_FAILURE
