"""Application wiring: builds resolution and enrollment services from config."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from claimbroker.adapters.cache import InMemoryCacheBackend, SqlAlchemyCacheBackend
from claimbroker.adapters.mpi import MPIClient, MPIResponseDecoder
from claimbroker.adapters.observability import LoggingEventSink
from claimbroker.config import ConfigurationError, get_identity_cache_config, get_mpi_config
from claimbroker.domain.identity import (
    AttemptPolicy,
    EnrollmentOrchestrator,
    IdentityCache,
    ResolutionClient,
)

if TYPE_CHECKING:
    from claimbroker.config import IdentityCacheConfig, MPIConfig
    from claimbroker.domain.identity import EnrollmentResult
    from claimbroker.domain.model import ResolutionOutcome, Subject
    from claimbroker.domain.ports import CacheBackend, EventSink, RegistryTransport

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IdentityServices:
    resolver: ResolutionClient
    enrollment: EnrollmentOrchestrator
    mpi_client: MPIClient | None = None

    def close(self) -> None:
        if self.mpi_client is not None:
            self.mpi_client.close()


def build_cache_backend(config: IdentityCacheConfig) -> CacheBackend:
    if config.backend == "sqlite":
        if not config.database_uri:
            raise ConfigurationError("The sqlite identity cache requires a database URI")
        return SqlAlchemyCacheBackend.from_uri(config.database_uri)
    return InMemoryCacheBackend()


def build_identity_services(
    *,
    mpi_config: MPIConfig | None = None,
    cache_config: IdentityCacheConfig | None = None,
    transport: RegistryTransport | None = None,
    cache_backend: CacheBackend | None = None,
    sink: EventSink | None = None,
) -> IdentityServices:
    """Assemble the resolver and orchestrator; unspecified parts come from the environment."""

    effective_sink = sink or LoggingEventSink()
    effective_cache_config = cache_config or get_identity_cache_config()
    backend = cache_backend or build_cache_backend(effective_cache_config)
    cache = IdentityCache.from_config(backend, effective_cache_config, sink=effective_sink)

    effective_mpi_config = mpi_config or get_mpi_config()
    mpi_client: MPIClient | None = None
    effective_transport: RegistryTransport
    if transport is None:
        mpi_client = MPIClient(config=effective_mpi_config)
        effective_transport = mpi_client
    else:
        effective_transport = transport

    policy = AttemptPolicy(
        max_attempts=effective_mpi_config.max_attempts,
        backoff_seconds=effective_mpi_config.backoff_seconds,
    )
    resolver = ResolutionClient(
        transport=effective_transport,
        decoder=MPIResponseDecoder(),
        cache=cache,
        policy=policy,
        sink=effective_sink,
    )
    log.debug("Identity services ready (cache backend: %s)", effective_cache_config.backend)
    return IdentityServices(
        resolver=resolver,
        enrollment=EnrollmentOrchestrator(resolver=resolver, sink=effective_sink),
        mpi_client=mpi_client,
    )


def resolve_subject(
    subject: Subject, *, services: IdentityServices | None = None
) -> ResolutionOutcome:
    if services is not None:
        return services.resolver.resolve(subject)
    built = build_identity_services()
    try:
        return built.resolver.resolve(subject)
    finally:
        built.close()


def enroll_subject(
    subject: Subject, *, services: IdentityServices | None = None
) -> EnrollmentResult:
    if services is not None:
        return services.enrollment.ensure_enrolled(subject)
    built = build_identity_services()
    try:
        return built.enrollment.ensure_enrolled(subject)
    finally:
        built.close()
