"""Adapter for the master person index (MPI) SOAP service."""

from __future__ import annotations

from .client import MPIClient
from .parser import AddParser, MPIResponseDecoder, ProfileParser, match_code_family
from .requests import MPIRequestBuilder
from .schema import CorrelationId

__all__ = [
    "AddParser",
    "CorrelationId",
    "MPIClient",
    "MPIRequestBuilder",
    "MPIResponseDecoder",
    "ProfileParser",
    "match_code_family",
]
