"""Domain port definitions for adapters."""

from __future__ import annotations

from .cache import CacheBackend
from .observability import EventKind, EventSink, NullEventSink
from .registry import RegistryTransport, ResponseDecoder

__all__ = [
    "CacheBackend",
    "EventKind",
    "EventSink",
    "NullEventSink",
    "RegistryTransport",
    "ResponseDecoder",
]
