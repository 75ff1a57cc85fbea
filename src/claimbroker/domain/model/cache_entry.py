"""Cached resolution outcome."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime, timedelta

    from .outcome import Found, NotFound


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    outcome: Found | NotFound
    stored_at: datetime
    ttl: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.stored_at + self.ttl

    def is_live(self, now: datetime) -> bool:
        return now < self.expires_at
