"""Identity cache: outcome snapshots keyed by the subject's durable identity."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from claimbroker.domain.model import CacheEntry, Error, Found, NotFound
from claimbroker.domain.ports.observability import EventKind, NullEventSink

if TYPE_CHECKING:
    from collections.abc import Callable

    from claimbroker.config.identity_cache import IdentityCacheConfig
    from claimbroker.domain.model import ResolutionOutcome, Subject
    from claimbroker.domain.ports import CacheBackend, EventSink

log = getLogger(__name__)

KEY_PREFIX: Final[str] = "mpi-profile"
DEFAULT_FOUND_TTL: Final[timedelta] = timedelta(days=1)
DEFAULT_NOT_FOUND_TTL: Final[timedelta] = timedelta(minutes=30)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def cache_key_for(subject: Subject) -> str:
    """Derive the cache key from the subject's durable identity.

    The ICN wins when the subject already has one; otherwise the key is a digest
    of the normalized name, birth date and SSN so no SSN ends up in a key.
    """

    if subject.icn:
        return f"{KEY_PREFIX}:icn:{subject.icn}"
    parts = [
        *(name.strip().lower() for name in subject.given_names),
        subject.family_name.strip().lower(),
        subject.birth_date.isoformat(),
        subject.ssn,
    ]
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}:demographics:{digest}"


class IdentityCache:
    def __init__(
        self,
        backend: CacheBackend,
        *,
        found_ttl: timedelta = DEFAULT_FOUND_TTL,
        not_found_ttl: timedelta = DEFAULT_NOT_FOUND_TTL,
        clock: Callable[[], datetime] = _utcnow,
        sink: EventSink | None = None,
    ) -> None:
        if not_found_ttl >= found_ttl:
            raise ValueError("not_found_ttl must be shorter than found_ttl")
        self._backend = backend
        self._found_ttl = found_ttl
        self._not_found_ttl = not_found_ttl
        self._clock = clock
        self._sink = sink or NullEventSink()

    @classmethod
    def from_config(
        cls,
        backend: CacheBackend,
        config: IdentityCacheConfig,
        *,
        sink: EventSink | None = None,
    ) -> IdentityCache:
        return cls(
            backend,
            found_ttl=config.found_ttl,
            not_found_ttl=config.not_found_ttl,
            sink=sink,
        )

    def ttl_for(self, outcome: ResolutionOutcome) -> timedelta | None:
        match outcome:
            case Found():
                return self._found_ttl
            case NotFound():
                return self._not_found_ttl
            case Error():
                return None

    def get(self, key: str) -> CacheEntry | None:
        now = self._clock()
        entry = self._backend.get(key, now=now)
        if entry is None or not entry.is_live(now):
            return None
        return entry

    def put(self, key: str, outcome: ResolutionOutcome) -> CacheEntry | None:
        """Store ``outcome`` under ``key``; errors are skipped and return ``None``."""

        ttl = self.ttl_for(outcome)
        if ttl is None:
            log.debug("Not caching %s outcome for %s", outcome.kind, key)
            return None
        entry = CacheEntry(key=key, outcome=outcome, stored_at=self._clock(), ttl=ttl)
        self._backend.set(entry)
        self._sink.emit(EventKind.CACHE_WRITE, key, kind=outcome.kind, ttl=ttl.total_seconds())
        return entry

    def invalidate(self, key: str) -> None:
        self._backend.delete(key)
