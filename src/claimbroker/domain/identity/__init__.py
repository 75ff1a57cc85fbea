"""Identity resolution: classification, caching, lookup and enrollment."""

from __future__ import annotations

from .cache import IdentityCache, cache_key_for
from .classification import acknowledgement_error, classify
from .enrollment import (
    AlreadyPresent,
    Enrolled,
    EnrollmentOrchestrator,
    EnrollmentResult,
    unwrap_enrollment,
)
from .resolution import ResolutionClient
from .retry import AttemptPolicy, call_with_retry, is_transient

__all__ = [
    "AlreadyPresent",
    "AttemptPolicy",
    "Enrolled",
    "EnrollmentOrchestrator",
    "EnrollmentResult",
    "IdentityCache",
    "ResolutionClient",
    "acknowledgement_error",
    "cache_key_for",
    "call_with_retry",
    "classify",
    "is_transient",
    "unwrap_enrollment",
]
