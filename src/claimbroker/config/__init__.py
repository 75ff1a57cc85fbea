"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .identity_cache import IdentityCacheConfig, get_identity_cache_config
from .logging import configure_logging
from .mpi import MPIConfig, get_mpi_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "IdentityCacheConfig",
    "MPIConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_identity_cache_config",
    "get_mpi_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
