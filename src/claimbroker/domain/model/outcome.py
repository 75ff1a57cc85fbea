"""Resolution outcomes: the closed set of answers a registry lookup can give."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .enums import ErrorCause, OutcomeKind
from .profile import Profile  # noqa: TC001


@dataclass(frozen=True, slots=True)
class Found:
    profile: Profile

    kind: ClassVar[OutcomeKind] = OutcomeKind.FOUND


@dataclass(frozen=True, slots=True)
class NotFound:
    kind: ClassVar[OutcomeKind] = OutcomeKind.NOT_FOUND


@dataclass(frozen=True, slots=True)
class Error:
    cause: ErrorCause
    detail: str = field(default="", compare=False)

    kind: ClassVar[OutcomeKind] = OutcomeKind.ERROR


type ResolutionOutcome = Found | NotFound | Error
