from __future__ import annotations

import pytest

from claimbroker.domain.errors import RegistryError, TransportError
from claimbroker.domain.identity import ResolutionClient
from claimbroker.domain.model import Error, ErrorCause, Found, NotFound, RequestKind, Subject
from claimbroker.domain.ports import EventKind
from tests.helpers.identity import FakeRegistryTransport, RecordingEventSink, mpi_response


def test_second_resolve_within_ttl_is_served_from_cache(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    sink: RecordingEventSink,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_response.xml"))

    first = resolver.resolve(subject)
    second = resolver.resolve(subject)

    assert isinstance(first, Found)
    assert first.profile.icn == "1008714701V416111"
    assert second == first
    assert transport.calls == 1
    assert transport.requests[0].kind is RequestKind.SEARCH
    assert sink.kinds() == [EventKind.CACHE_MISS, EventKind.CACHE_WRITE, EventKind.CACHE_HIT]


def test_not_found_is_cached(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_not_found_response.xml"))

    assert resolver.resolve(subject) == NotFound()
    assert resolver.resolve(subject) == NotFound()
    assert transport.calls == 1


@pytest.mark.parametrize(
    ("fixture", "cause", "attempts"),
    [
        ("find_profile_failure_response.xml", ErrorCause.SERVER_ERROR, 3),
        ("find_profile_invalid_response.xml", ErrorCause.INVALID_REQUEST, 1),
    ],
)
def test_error_outcomes_are_not_cached(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
    fixture: str,
    cause: ErrorCause,
    attempts: int,
) -> None:
    transport.queue(*(mpi_response(fixture) for _ in range(attempts)))

    outcome = resolver.resolve(subject)

    assert outcome == Error(cause)
    assert transport.calls == attempts
    assert resolver._cache.get(resolver.cache_key(subject)) is None  # noqa: SLF001


def test_transport_errors_are_retried_then_resolved(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    sink: RecordingEventSink,
    subject: Subject,
) -> None:
    transport.queue(
        TransportError("connection reset"),
        TransportError("timed out", timeout=True),
        mpi_response("find_profile_response.xml"),
    )

    outcome = resolver.resolve(subject)

    assert isinstance(outcome, Found)
    assert transport.calls == 3
    assert sink.count(EventKind.RETRY) == 2


def test_exhausted_transport_errors_surface_as_transport_failure(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    sink: RecordingEventSink,
    subject: Subject,
) -> None:
    transport.queue(*(TransportError("down") for _ in range(3)))

    assert resolver.resolve(subject) == Error(ErrorCause.TRANSPORT_FAILURE)
    assert sink.count(EventKind.FAILURE) == 1

    transport.queue(mpi_response("find_profile_not_found_response.xml"))
    assert resolver.resolve(subject) == NotFound()


def test_icn_for(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_response.xml"))

    assert resolver.icn_for(subject) == "1008714701V416111"


def test_icn_for_raises_on_error(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_invalid_response.xml"))

    with pytest.raises(RegistryError) as exc:
        resolver.icn_for(subject)

    assert exc.value.cause is ErrorCause.INVALID_REQUEST


def test_icn_for_not_found_is_none(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    transport.queue(mpi_response("find_profile_not_found_response.xml"))

    assert resolver.icn_for(subject) is None


def test_cache_outcome_prefills_the_cache(
    resolver: ResolutionClient,
    transport: FakeRegistryTransport,
    subject: Subject,
) -> None:
    resolver.cache_outcome(subject, NotFound())

    assert resolver.resolve(subject) == NotFound()
    assert transport.calls == 0
