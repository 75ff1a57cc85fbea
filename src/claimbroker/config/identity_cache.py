"""Identity cache configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Literal, cast

from .env import env_int
from .errors import ConfigurationError
from .storage import get_database_config

FOUND_TTL_SECONDS = 86_400
NOT_FOUND_TTL_SECONDS = 1_800

type CacheBackendName = Literal["memory", "sqlite"]


@dataclass(frozen=True, slots=True)
class IdentityCacheConfig:
    """TTLs per outcome kind plus the storage backend selection.

    Errors have no TTL: they are never cached.
    """

    found_ttl: timedelta = timedelta(seconds=FOUND_TTL_SECONDS)
    not_found_ttl: timedelta = timedelta(seconds=NOT_FOUND_TTL_SECONDS)
    backend: CacheBackendName = "memory"
    database_uri: str | None = None

    def __post_init__(self) -> None:
        if self.not_found_ttl <= timedelta(0):
            raise ConfigurationError("Not-found TTL must be positive")
        if self.not_found_ttl >= self.found_ttl:
            raise ConfigurationError(
                "Not-found TTL must be shorter than the found TTL "
                f"({self.not_found_ttl} >= {self.found_ttl})"
            )
        if self.backend == "sqlite" and not self.database_uri:
            raise ConfigurationError("The sqlite identity cache requires a database URI")


def get_identity_cache_config() -> IdentityCacheConfig:
    backend = os.getenv("IDENTITY_CACHE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        raise ConfigurationError(f"Unsupported identity cache backend: {backend}")

    return IdentityCacheConfig(
        found_ttl=timedelta(seconds=env_int("IDENTITY_CACHE_FOUND_TTL", FOUND_TTL_SECONDS)),
        not_found_ttl=timedelta(
            seconds=env_int("IDENTITY_CACHE_NOT_FOUND_TTL", NOT_FOUND_TTL_SECONDS)
        ),
        backend=cast("CacheBackendName", backend),
        database_uri=get_database_config().uri if backend == "sqlite" else None,
    )
