"""MPI wire format: namespaces, element paths, codes and identifier families.

Everything the registry protocol encodes lives here so parsing and request
building never hard-code strings of their own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from claimbroker.domain.model import AckStatus, IdentifierKind

SOAP_ENV_NS: Final[str] = "http://schemas.xmlsoap.org/soap/envelope/"
IDM_NS: Final[str] = "http://vaww.oed.oit.va.gov"
HL7_NS: Final[str] = "urn:hl7-org:v3"

SEARCH_REQUEST_INTERACTION: Final[str] = "PRPA_IN201305UV02"
SEARCH_RESPONSE_INTERACTION: Final[str] = "PRPA_IN201306UV02"
ADD_PERSON_INTERACTION: Final[str] = "PRPA_IN201301UV02"
ADD_PERSON_RESPONSE_INTERACTION: Final[str] = "MCCI_IN000002UV01"

# Paths are local element names; namespaces are stripped before traversal.
type ElementPath = tuple[str, ...]

SEARCH_BODY_PATH: Final[ElementPath] = ("Body", SEARCH_RESPONSE_INTERACTION)
ADD_BODY_PATH: Final[ElementPath] = ("Body", ADD_PERSON_RESPONSE_INTERACTION)
ACK_TYPE_CODE_PATH: Final[ElementPath] = ("acknowledgement", "typeCode")
ACK_DETAIL_CODE_PATH: Final[ElementPath] = ("acknowledgement", "acknowledgementDetail", "code")
QUERY_RESPONSE_CODE_PATH: Final[ElementPath] = (
    "controlActProcess",
    "queryAck",
    "queryResponseCode",
)
REGISTRATION_EVENT_PATH: Final[ElementPath] = (
    "controlActProcess",
    "subject",
    "registrationEvent",
)
PATIENT_PATH: Final[ElementPath] = ("subject1", "patient")
PATIENT_PERSON_PATH: Final[ElementPath] = ("patientPerson",)
PRIOR_REGISTRATION_ID_PATH: Final[ElementPath] = ("replacementOf", "priorRegistration", "id")
OTHER_ID_PATH: Final[ElementPath] = ("asOtherIDs", "id")

ACK_CODES: Final[dict[str, AckStatus]] = {
    "AA": AckStatus.SUCCESS,
    "AR": AckStatus.FAILURE,
    "AE": AckStatus.INVALID_REQUEST,
}
QUERY_NOT_FOUND: Final[str] = "NF"

SSN_ROOT: Final[str] = "2.16.840.1.113883.4.1"
ICN_ROOT: Final[str] = "2.16.840.1.113883.4.349"
BIRTH_TIME_FORMAT: Final[str] = "%Y%m%d"
LEGAL_NAME_USE: Final[str] = "L"

# Enrollment acknowledgement detail codes, e.g. ``BRLS123456A`` or
# ``111985523^PI^200BRLS^USVBA``. Prefixes are disjoint and case-sensitive.
CODE_FAMILY_PREFIXES: Final[dict[str, IdentifierKind]] = {
    "BRLS": IdentifierKind.BIRLS_ID,
    "CORP": IdentifierKind.PARTICIPANT_ID,
}

HL7_SEPARATOR: Final[str] = "^"
ACTIVE_STATUSES: Final[frozenset[str]] = frozenset({"A", "P"})
HISTORICAL_STATUS: Final[str] = "H"

# (id type, source id) -> identifier kind, for correlation ids on a patient.
CORRELATION_SOURCES: Final[dict[tuple[str, str], IdentifierKind]] = {
    ("NI", "200M"): IdentifierKind.ICN,
    ("NI", "200DOD"): IdentifierKind.EDIPI,
    ("PI", "200BRLS"): IdentifierKind.BIRLS_ID,
    ("PI", "200CORP"): IdentifierKind.PARTICIPANT_ID,
    ("PI", "200MH"): IdentifierKind.MHV_CORRELATION_ID,
    ("PI", "200VETS"): IdentifierKind.VA_PROFILE_ID,
    ("PN", "200PROV"): IdentifierKind.SEC_ID,
}

_LEADING_DIGITS = re.compile(r"^[0-9]+")


def leading_digits(value: str) -> str | None:
    match = _LEADING_DIGITS.match(value)
    return match.group(0) if match else None


@dataclass(frozen=True, slots=True)
class CorrelationId:
    """An HL7 identifier ``value^type^source^authority[^status]``."""

    value: str
    id_type: str
    source: str
    authority: str
    status: str | None = None

    @classmethod
    def parse(cls, extension: str) -> CorrelationId | None:
        parts = extension.split(HL7_SEPARATOR)
        if len(parts) < 4 or not parts[0]:
            return None
        status = parts[4] if len(parts) > 4 and parts[4] else None
        return cls(
            value=parts[0],
            id_type=parts[1],
            source=parts[2],
            authority=parts[3],
            status=status,
        )

    @property
    def kind(self) -> IdentifierKind | None:
        return CORRELATION_SOURCES.get((self.id_type, self.source))

    @property
    def is_active(self) -> bool:
        return self.status is None or self.status in ACTIVE_STATUSES

    @property
    def with_authority(self) -> str:
        return HL7_SEPARATOR.join((self.value, self.id_type, self.source, self.authority))
