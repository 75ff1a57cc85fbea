"""Ports for talking to the identity registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from claimbroker.domain.model import RawResponse, RegistryReply, RegistryRequest, RequestKind


@runtime_checkable
class RegistryTransport(Protocol):
    """Synchronous request/response channel to the registry.

    Implementations raise :class:`claimbroker.domain.errors.TransportError` when
    no usable reply came back (timeouts, connection errors, non-2xx responses
    without a parseable body).
    """

    def send(self, request: RegistryRequest) -> RawResponse: ...


@runtime_checkable
class ResponseDecoder(Protocol):
    """Turns a raw registry document into a typed reply."""

    def decode(self, raw: RawResponse, *, kind: RequestKind) -> RegistryReply: ...


__all__ = ["RegistryTransport", "ResponseDecoder"]
