from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from claimbroker.adapters.cache import InMemoryCacheBackend
from claimbroker.adapters.mpi import MPIResponseDecoder
from claimbroker.domain.identity import (
    AttemptPolicy,
    EnrollmentOrchestrator,
    IdentityCache,
    ResolutionClient,
)
from tests.helpers.identity import FakeClock, FakeRegistryTransport, RecordingEventSink, make_subject

if TYPE_CHECKING:
    from claimbroker.domain.model import Subject


@pytest.fixture
def subject() -> Subject:
    return make_subject()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def transport() -> FakeRegistryTransport:
    return FakeRegistryTransport()


@pytest.fixture
def cache_backend() -> InMemoryCacheBackend:
    return InMemoryCacheBackend()


@pytest.fixture
def identity_cache(
    cache_backend: InMemoryCacheBackend,
    clock: FakeClock,
    sink: RecordingEventSink,
) -> IdentityCache:
    return IdentityCache(cache_backend, clock=clock, sink=sink)


@pytest.fixture
def resolver(
    transport: FakeRegistryTransport,
    identity_cache: IdentityCache,
    sink: RecordingEventSink,
) -> ResolutionClient:
    return ResolutionClient(
        transport=transport,
        decoder=MPIResponseDecoder(),
        cache=identity_cache,
        policy=AttemptPolicy(max_attempts=3),
        sink=sink,
    )


@pytest.fixture
def orchestrator(resolver: ResolutionClient, sink: RecordingEventSink) -> EnrollmentOrchestrator:
    return EnrollmentOrchestrator(resolver=resolver, sink=sink)
