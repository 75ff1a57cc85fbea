"""Pydantic models for outcomes persisted by the identity cache."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from pydantic import BaseModel, ConfigDict

from claimbroker.domain.model import Found, IdentifierKind, NotFound, OutcomeKind, Profile


class CacheBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class CachedProfile(CacheBaseModel):
    """A profile as stored on disk. The SSN is never persisted."""

    identifiers: dict[IdentifierKind, str] = {}
    historical_icns: list[str] = []
    icn_with_aaid: str | None = None
    given_names: list[str] = []
    family_name: str | None = None
    birth_date: date | None = None
    gender: str | None = None

    @classmethod
    def from_domain(cls, profile: Profile) -> CachedProfile:
        return cls(
            identifiers=dict(profile.identifiers),
            historical_icns=list(profile.historical_icns),
            icn_with_aaid=profile.icn_with_aaid,
            given_names=list(profile.given_names),
            family_name=profile.family_name,
            birth_date=profile.birth_date,
            gender=profile.gender,
        )

    def to_domain(self) -> Profile:
        return Profile(
            identifiers=self.identifiers,
            historical_icns=tuple(self.historical_icns),
            icn_with_aaid=self.icn_with_aaid,
            given_names=tuple(self.given_names),
            family_name=self.family_name,
            birth_date=self.birth_date,
            gender=self.gender,
        )


class CachedOutcome(CacheBaseModel):
    kind: OutcomeKind
    profile: CachedProfile | None = None

    @classmethod
    def from_domain(cls, outcome: Found | NotFound) -> CachedOutcome:
        match outcome:
            case Found(profile):
                return cls(kind=OutcomeKind.FOUND, profile=CachedProfile.from_domain(profile))
            case NotFound():
                return cls(kind=OutcomeKind.NOT_FOUND)

    def to_domain(self) -> Found | NotFound:
        match self.kind:
            case OutcomeKind.FOUND if self.profile is not None:
                return Found(self.profile.to_domain())
            case OutcomeKind.NOT_FOUND:
                return NotFound()
            case _:
                raise ValueError(f"cannot restore cached outcome of kind {self.kind}")
