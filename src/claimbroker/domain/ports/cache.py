"""Port for the key-value store backing the identity cache."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from claimbroker.domain.model import CacheEntry


@runtime_checkable
class CacheBackend(Protocol):
    """Key-value storage with per-entry expiry.

    ``set`` must be all-or-nothing per entry and must not block writers of other
    keys. Backends return ``None`` for entries that expired before ``now``.
    """

    def get(self, key: str, *, now: datetime) -> CacheEntry | None: ...

    def set(self, entry: CacheEntry) -> None: ...

    def delete(self, key: str) -> None: ...


__all__ = ["CacheBackend"]
