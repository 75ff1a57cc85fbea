"""Registry profile and identifier code structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .enums import IdentifierKind

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date


def _freeze(values: Mapping[IdentifierKind, str]) -> Mapping[IdentifierKind, str]:
    return MappingProxyType({IdentifierKind(kind): value for kind, value in values.items()})


@dataclass(frozen=True, slots=True, kw_only=True)
class Profile:
    """A person as the registry knows them."""

    identifiers: Mapping[IdentifierKind, str] = field(default_factory=dict)
    historical_icns: tuple[str, ...] = ()
    icn_with_aaid: str | None = None
    given_names: tuple[str, ...] = ()
    family_name: str | None = None
    birth_date: date | None = None
    gender: str | None = None
    ssn: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "identifiers", _freeze(self.identifiers))

    @property
    def icn(self) -> str | None:
        return self.identifiers.get(IdentifierKind.ICN)

    @property
    def edipi(self) -> str | None:
        return self.identifiers.get(IdentifierKind.EDIPI)

    @property
    def birls_id(self) -> str | None:
        return self.identifiers.get(IdentifierKind.BIRLS_ID)

    @property
    def participant_id(self) -> str | None:
        return self.identifiers.get(IdentifierKind.PARTICIPANT_ID)

    @property
    def mhv_correlation_id(self) -> str | None:
        return self.identifiers.get(IdentifierKind.MHV_CORRELATION_ID)

    @property
    def vet360_id(self) -> str | None:
        return self.identifiers.get(IdentifierKind.VA_PROFILE_ID)


@dataclass(frozen=True, slots=True)
class IdentifierCodes:
    """Identifiers extracted from an enrollment acknowledgement.

    ``ids`` holds at most one value per recognized code family; ``other`` keeps
    the raw codes no family claimed.
    """

    ids: Mapping[IdentifierKind, str] = field(default_factory=dict)
    other: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _freeze(self.ids))

    @property
    def is_empty(self) -> bool:
        return not self.ids and not self.other

    def as_dict(self) -> dict[str, str | list[str]]:
        result: dict[str, str | list[str]] = {str(kind): value for kind, value in self.ids.items()}
        if self.other:
            result["other"] = list(self.other)
        return result
