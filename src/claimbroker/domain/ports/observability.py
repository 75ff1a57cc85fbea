"""Port for reporting attempt, retry and cache events."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


class EventKind(StrEnum):
    RETRY = "retry"
    FAILURE = "failure"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    CACHE_WRITE = "cache_write"
    ENROLLMENT_SUBMITTED = "enrollment_submitted"


@runtime_checkable
class EventSink(Protocol):
    def emit(self, kind: EventKind, key: str, **details: object) -> None: ...


class NullEventSink:
    """Sink that drops every event."""

    def emit(self, kind: EventKind, key: str, **details: object) -> None:
        del kind, key, details


__all__ = ["EventKind", "EventSink", "NullEventSink"]
