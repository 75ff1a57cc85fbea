"""Master person index (MPI) configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_float, env_int, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

MPI_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_PROCESSING_CODE = "T"
DEFAULT_SENDER_ID = "200VGOV"
DEFAULT_RECEIVER_ID = "200M"
SOAP_HEADERS = {
    "Content-Type": "text/xml;charset=UTF-8",
    "Accept": "text/xml",
}


@dataclass(frozen=True, slots=True)
class MPIConfig:
    """Holds MPI connection and retry settings."""

    resilience: ResilienceConfig
    processing_code: str = DEFAULT_PROCESSING_CODE
    sender_id: str = DEFAULT_SENDER_ID
    receiver_id: str = DEFAULT_RECEIVER_ID
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("MPI max_attempts must be at least 1")
        if self.processing_code not in {"T", "P"}:
            raise ConfigurationError(
                f"MPI processing code must be 'T' or 'P', got {self.processing_code!r}"
            )


def get_mpi_config(*, resilience: ResilienceConfig | None = None) -> MPIConfig:
    values = require_env_vars(("MPI_BASE_URL",))
    rate = env_float("MPI_RATE_LIMIT_PER_SECOND", 0.0)

    return MPIConfig(
        resilience=resilience
        or ResilienceConfig(
            name="mpi",
            base_url=values["MPI_BASE_URL"],
            timeout_seconds=env_float("MPI_TIMEOUT_SECONDS", MPI_TIMEOUT_SECONDS),
            retry=RetryPolicy(total=env_int("MPI_TRANSPORT_RETRIES", 0)),
            ratelimit=RateLimit(max_calls=1, per_seconds=1.0 / rate) if rate > 0 else None,
            default_headers=SOAP_HEADERS,
        ),
        processing_code=os.getenv("MPI_PROCESSING_CODE", DEFAULT_PROCESSING_CODE),
        sender_id=os.getenv("MPI_SENDER_ID", DEFAULT_SENDER_ID),
        max_attempts=env_int("MPI_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        backoff_seconds=env_float("MPI_BACKOFF_SECONDS", 0.0),
    )
