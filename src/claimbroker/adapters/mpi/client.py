"""HTTP transport for the MPI SOAP service."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

import httpx

from claimbroker.adapters.http_resilience import ResilientClient, build_limiter
from claimbroker.config.errors import ConfigurationError
from claimbroker.domain.errors import TransportError
from claimbroker.domain.model import RawResponse

from .parser import is_parseable
from .requests import MPIRequestBuilder

if TYPE_CHECKING:
    from types import TracebackType

    from aiolimiter import AsyncLimiter

    from claimbroker.config.http_resilience import ResilienceConfig
    from claimbroker.config.mpi import MPIConfig
    from claimbroker.domain.model import RegistryRequest

log = getLogger(__name__)


class ClientFactory(Protocol):
    def __call__(
        self, config: ResilienceConfig, /, *, limiter: AsyncLimiter | None = None
    ) -> ResilientClient: ...


class MPIClient:
    """Posts SOAP envelopes to MPI and hands back the raw reply.

    Network failures, timeouts and non-2xx replies without a SOAP body surface as
    :class:`TransportError`; everything else is left for the decoder.

    One rate limiter and one event loop are shared by every send, so the limit holds
    across calls. Call :meth:`close` (or use the client as a context manager) when done.
    """

    def __init__(
        self,
        *,
        config: MPIConfig,
        client_factory: ClientFactory | None = None,
        builder: MPIRequestBuilder | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._builder = builder or MPIRequestBuilder(config)
        self._limiter = build_limiter(config.resilience.ratelimit)
        self._runner: asyncio.Runner | None = None

    def __enter__(self) -> MPIClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._runner is not None:
            self._runner.close()
            self._runner = None

    def send(self, request: RegistryRequest) -> RawResponse:
        if self._runner is None:
            self._runner = asyncio.Runner()
        return self._runner.run(self._send_async(request))

    async def _send_async(self, request: RegistryRequest) -> RawResponse:
        if self._resilience.base_url is None:
            raise ConfigurationError("Missing MPI base_url in resilience configuration")

        interaction = self._builder.interaction_for(request.kind)
        envelope = self._builder.build(request)
        headers = {"SOAPAction": interaction}

        try:
            async with self._client_factory(self._resilience, limiter=self._limiter) as client:
                response = await client.post("", content=envelope, headers=headers)
        except httpx.TimeoutException as exc:
            log.warning("MPI %s timed out", request.kind)
            raise TransportError(f"MPI {request.kind} timed out", timeout=True) from exc
        except httpx.HTTPError as exc:
            log.warning("MPI %s transport failure: %s", request.kind, exc)
            raise TransportError(f"MPI {request.kind} failed: {exc}") from exc

        raw = RawResponse(status_code=response.status_code, body=response.content)
        if not raw.is_success and not is_parseable(raw.body):
            raise TransportError(
                f"MPI {request.kind} returned HTTP {raw.status_code}",
                status_code=raw.status_code,
            )
        log.debug("MPI %s returned HTTP %s", request.kind, raw.status_code)
        return raw
