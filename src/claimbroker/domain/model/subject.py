"""The person whose identity is being resolved."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol

_GENDERS = frozenset({"M", "F"})


class SubjectSource(Protocol):
    """Anything shaped like a user identity record (session user, form section)."""

    @property
    def first_name(self) -> str | None: ...

    @property
    def last_name(self) -> str | None: ...

    @property
    def birth_date(self) -> date | str | None: ...

    @property
    def ssn(self) -> str | None: ...


@dataclass(frozen=True, slots=True, kw_only=True)
class Subject:
    given_names: tuple[str, ...]
    family_name: str
    birth_date: date
    ssn: str
    gender: str | None = None
    icn: str | None = None
    edipi: str | None = None
    birls_id: str | None = None
    participant_id: str | None = None

    def __post_init__(self) -> None:
        if not self.given_names or not self.given_names[0].strip():
            raise ValueError("subject requires at least one given name")
        if not self.family_name.strip():
            raise ValueError("subject requires a family name")
        if len(self.ssn) != 9 or not self.ssn.isdigit():
            raise ValueError("ssn must be nine digits")
        if self.gender is not None and self.gender not in _GENDERS:
            raise ValueError(f"unsupported gender code: {self.gender!r}")

    @property
    def first_name(self) -> str:
        return self.given_names[0]

    @property
    def middle_names(self) -> tuple[str, ...]:
        return self.given_names[1:]

    @classmethod
    def from_source(cls, source: SubjectSource) -> Subject:
        """Build a subject from a user-like object without touching the object.

        Optional attributes (``middle_name``, ``gender``, ``icn``, ``edipi``,
        ``birls_id``, ``participant_id``) are read when present. A gender of
        ``"U"`` (unknown) is treated as absent.
        """

        first = source.first_name
        last = source.last_name
        if not first or not last:
            raise ValueError("subject source is missing a first or last name")
        middle = getattr(source, "middle_name", None)
        given = (first, middle) if middle else (first,)

        raw_birth = source.birth_date
        if raw_birth is None:
            raise ValueError("subject source is missing a birth date")
        birth = raw_birth if isinstance(raw_birth, date) else date.fromisoformat(raw_birth)

        gender = getattr(source, "gender", None)
        if gender == "U":
            gender = None

        return cls(
            given_names=given,
            family_name=last,
            birth_date=birth,
            ssn=(source.ssn or "").replace("-", ""),
            gender=gender,
            icn=getattr(source, "icn", None),
            edipi=getattr(source, "edipi", None),
            birls_id=getattr(source, "birls_id", None),
            participant_id=getattr(source, "participant_id", None),
        )
