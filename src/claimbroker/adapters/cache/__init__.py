"""Identity cache storage backends."""

from __future__ import annotations

from .memory import InMemoryCacheBackend
from .schema import CachedOutcome, CachedProfile
from .sqlalchemy import SqlAlchemyCacheBackend, create_cache_tables, identity_cache_table

__all__ = [
    "CachedOutcome",
    "CachedProfile",
    "InMemoryCacheBackend",
    "SqlAlchemyCacheBackend",
    "create_cache_tables",
    "identity_cache_table",
]
