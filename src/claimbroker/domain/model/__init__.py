"""Domain model for identity resolution."""

from __future__ import annotations

from .cache_entry import CacheEntry
from .enums import AckStatus, ErrorCause, IdentifierKind, OutcomeKind, RequestKind
from .outcome import Error, Found, NotFound, ResolutionOutcome
from .profile import IdentifierCodes, Profile
from .registry import RawResponse, RegistryReply, RegistryRequest
from .subject import Subject, SubjectSource

__all__ = [
    "AckStatus",
    "CacheEntry",
    "Error",
    "ErrorCause",
    "Found",
    "IdentifierCodes",
    "IdentifierKind",
    "NotFound",
    "OutcomeKind",
    "Profile",
    "RawResponse",
    "RegistryReply",
    "RegistryRequest",
    "RequestKind",
    "ResolutionOutcome",
    "Subject",
    "SubjectSource",
]
