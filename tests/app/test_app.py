from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace
from typing import cast

import pytest

from claimbroker.adapters.cache import InMemoryCacheBackend, SqlAlchemyCacheBackend
from claimbroker.adapters.mpi import MPIClient
from claimbroker.app import (
    build_cache_backend,
    build_identity_services,
    enroll_subject,
    resolve_subject,
)
from claimbroker.config import ConfigurationError, IdentityCacheConfig, MPIConfig, ResilienceConfig
from claimbroker.domain.identity import Enrolled
from claimbroker.domain.model import Found, RawResponse
from tests.helpers.identity import (
    FakeRegistryTransport,
    RecordingEventSink,
    add_person_body,
    make_subject,
    mpi_response,
)


def _mpi_config(max_attempts: int = 2) -> MPIConfig:
    return MPIConfig(
        resilience=ResilienceConfig(name="mpi", base_url="https://mpi.example.test/psim"),
        max_attempts=max_attempts,
    )


def test_build_cache_backend_selects_storage() -> None:
    memory = build_cache_backend(IdentityCacheConfig())
    sqlite = build_cache_backend(
        IdentityCacheConfig(backend="sqlite", database_uri="sqlite+pysqlite:///:memory:")
    )

    assert isinstance(memory, InMemoryCacheBackend)
    assert isinstance(sqlite, SqlAlchemyCacheBackend)


def test_sqlite_backend_without_uri_is_configuration_error() -> None:
    config = cast("IdentityCacheConfig", SimpleNamespace(backend="sqlite", database_uri=None))

    with pytest.raises(ConfigurationError, match="database URI"):
        build_cache_backend(config)


def test_services_own_the_mpi_client_they_build() -> None:
    built = build_identity_services(mpi_config=_mpi_config(), cache_config=IdentityCacheConfig())
    injected = build_identity_services(
        mpi_config=_mpi_config(),
        cache_config=IdentityCacheConfig(),
        transport=FakeRegistryTransport(),
    )

    assert isinstance(built.mpi_client, MPIClient)
    assert injected.mpi_client is None
    built.close()
    injected.close()


def test_services_share_one_cache_between_resolver_and_enrollment() -> None:
    transport = FakeRegistryTransport().queue(
        mpi_response("find_profile_not_found_response.xml"),
        RawResponse(200, add_person_body("BRLS555000", "CORP777000")),
    )
    services = build_identity_services(
        mpi_config=_mpi_config(),
        cache_config=IdentityCacheConfig(not_found_ttl=timedelta(minutes=5)),
        transport=transport,
        sink=RecordingEventSink(),
    )
    subject = make_subject()

    result = enroll_subject(subject, services=services)
    outcome = resolve_subject(subject, services=services)

    assert isinstance(result, Enrolled)
    assert isinstance(outcome, Found)
    assert outcome.profile.birls_id == "555000"
    assert transport.calls == 2


def test_max_attempts_come_from_mpi_config() -> None:
    transport = FakeRegistryTransport().queue(
        *(mpi_response("find_profile_failure_response.xml") for _ in range(2))
    )
    services = build_identity_services(
        mpi_config=_mpi_config(max_attempts=2),
        cache_config=IdentityCacheConfig(),
        transport=transport,
    )

    resolve_subject(make_subject(), services=services)

    assert transport.calls == 2
