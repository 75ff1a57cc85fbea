"""Event sink that reports resolution events through the logging module."""

from __future__ import annotations

import logging
from typing import Final

from claimbroker.domain.ports.observability import EventKind

log = logging.getLogger(__name__)

_LEVELS: Final[dict[EventKind, int]] = {
    EventKind.FAILURE: logging.WARNING,
    EventKind.RETRY: logging.INFO,
    EventKind.ENROLLMENT_SUBMITTED: logging.INFO,
    EventKind.CACHE_HIT: logging.DEBUG,
    EventKind.CACHE_MISS: logging.DEBUG,
    EventKind.CACHE_WRITE: logging.DEBUG,
}


class LoggingEventSink:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or log

    def emit(self, kind: EventKind, key: str, **details: object) -> None:
        rendered = " ".join(f"{name}={value}" for name, value in sorted(details.items()))
        self._log.log(_LEVELS.get(kind, logging.INFO), "%s %s %s", kind, key, rendered)
