"""Process-local identity cache backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from claimbroker.domain.model import CacheEntry

DEFAULT_PURGE_EVERY = 1000


class InMemoryCacheBackend:
    """Dictionary-backed cache.

    Expired entries are dropped when read, and every ``purge_every`` writes the whole
    map is swept so keys that are never read again do not accumulate.
    """

    def __init__(self, *, purge_every: int = DEFAULT_PURGE_EVERY) -> None:
        if purge_every < 1:
            raise ValueError("purge_every must be at least 1")
        self._entries: dict[str, CacheEntry] = {}
        self._purge_every = purge_every
        self._writes = 0

    def get(self, key: str, *, now: datetime) -> CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(now):
            del self._entries[key]
            return None
        return entry

    def set(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry
        self._writes += 1
        if self._writes % self._purge_every == 0:
            self.purge_expired(now=entry.stored_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self, *, now: datetime) -> int:
        expired = [key for key, entry in list(self._entries.items()) if not entry.is_live(now)]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
