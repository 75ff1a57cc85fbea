"""Decode MPI SOAP replies into typed registry replies.

All knowledge of where things live inside a response document is confined to
this module and :mod:`.schema`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import date, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from claimbroker.domain.model import (
    AckStatus,
    IdentifierCodes,
    IdentifierKind,
    Profile,
    RegistryReply,
    RequestKind,
)

from .schema import (
    ACK_CODES,
    ACK_DETAIL_CODE_PATH,
    ACK_TYPE_CODE_PATH,
    ADD_BODY_PATH,
    BIRTH_TIME_FORMAT,
    CODE_FAMILY_PREFIXES,
    HISTORICAL_STATUS,
    HL7_SEPARATOR,
    LEGAL_NAME_USE,
    OTHER_ID_PATH,
    PATIENT_PATH,
    PATIENT_PERSON_PATH,
    PRIOR_REGISTRATION_ID_PATH,
    QUERY_NOT_FOUND,
    QUERY_RESPONSE_CODE_PATH,
    REGISTRATION_EVENT_PATH,
    SEARCH_BODY_PATH,
    SSN_ROOT,
    CorrelationId,
    ElementPath,
    leading_digits,
)

if TYPE_CHECKING:
    from claimbroker.domain.model import RawResponse

log = getLogger(__name__)


def parse_document(body: bytes) -> ET.Element | None:
    """Parse ``body`` and drop namespaces from every tag; ``None`` if not XML."""

    try:
        root = ET.fromstring(body)  # noqa: S314
    except ET.ParseError as exc:
        log.warning("Unparseable MPI response: %s", exc)
        return None
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = element.tag.rpartition("}")[2]
    return root


def is_parseable(body: bytes) -> bool:
    try:
        ET.fromstring(body)  # noqa: S314
    except ET.ParseError:
        return False
    return True


def locate_all(element: ET.Element | None, path: ElementPath) -> list[ET.Element]:
    if element is None:
        return []
    return element.findall("/".join(path))


def locate(element: ET.Element | None, path: ElementPath) -> ET.Element | None:
    found = locate_all(element, path)
    return found[0] if found else None


def match_code_family(raw_code: str) -> tuple[IdentifierKind, str] | None:
    """Return ``(kind, numeric id)`` when exactly one family claims ``raw_code``.

    Codes claimed by several families, or yielding no digits, are left
    unclassified rather than guessed into a family.
    """

    segments = raw_code.split(HL7_SEPARATOR)
    candidates: list[tuple[IdentifierKind, str | None]] = []
    for prefix, kind in CODE_FAMILY_PREFIXES.items():
        if raw_code.startswith(prefix):
            candidates.append((kind, leading_digits(raw_code[len(prefix) :])))
        elif len(segments) >= 3 and segments[2].endswith(prefix):
            candidates.append((kind, leading_digits(segments[0])))

    if len(candidates) != 1:
        return None
    kind, value = candidates[0]
    if value is None:
        return None
    return kind, value


class _AcknowledgementParser:
    body_path: ElementPath

    def __init__(self, body: bytes) -> None:
        self._original_body = locate(parse_document(body), self.body_path)
        type_code = locate(self._original_body, ACK_TYPE_CODE_PATH)
        self.code: str | None = type_code.get("code") if type_code is not None else None

    @property
    def ack_status(self) -> AckStatus:
        if self.code is None:
            return AckStatus.UNKNOWN
        return ACK_CODES.get(self.code, AckStatus.UNKNOWN)

    def failed_request(self) -> bool:
        """MPI reports an internal error."""
        return self.ack_status is AckStatus.FAILURE

    def invalid_request(self) -> bool:
        """MPI considers the request malformed."""
        return self.ack_status is AckStatus.INVALID_REQUEST

    def failed_or_invalid(self) -> bool:
        return self.failed_request() or self.invalid_request()


class AddParser(_AcknowledgementParser):
    """Parses the acknowledgement MPI sends back for an add-person request."""

    body_path = ADD_BODY_PATH

    def parse_identifier_codes(self) -> IdentifierCodes:
        """Sort acknowledgement detail codes into identifier families.

        A missing body or an acknowledgement without detail codes yields an empty
        result. Later codes of the same family replace earlier ones.
        """

        ids: dict[IdentifierKind, str] = {}
        other: list[str] = []
        for element in locate_all(self._original_body, ACK_DETAIL_CODE_PATH):
            raw_code = element.get("code")
            if raw_code is None:
                continue
            matched = match_code_family(raw_code)
            if matched is None:
                other.append(raw_code)
                continue
            kind, value = matched
            ids[kind] = value
        return IdentifierCodes(ids=ids, other=tuple(other))

    def parse(self) -> RegistryReply:
        return RegistryReply(
            ack=self.ack_status,
            ack_code=self.code,
            identifier_codes=self.parse_identifier_codes(),
        )


class ProfileParser(_AcknowledgementParser):
    """Parses a search (find profile) reply into the matching profile, if any."""

    body_path = SEARCH_BODY_PATH

    def not_found(self) -> bool:
        query_code = locate(self._original_body, QUERY_RESPONSE_CODE_PATH)
        return query_code is not None and query_code.get("code") == QUERY_NOT_FOUND

    def parse_profile(self) -> Profile | None:
        if self.not_found():
            return None
        registration = locate(self._original_body, REGISTRATION_EVENT_PATH)
        patient = locate(registration, PATIENT_PATH)
        if patient is None:
            return None
        person = locate(patient, PATIENT_PERSON_PATH)

        identifiers: dict[IdentifierKind, str] = {}
        icn_with_aaid: str | None = None
        historical: list[str] = []
        for element in patient.findall("id"):
            correlation = _correlation_id(element)
            if correlation is None or correlation.kind is None:
                continue
            if correlation.kind is IdentifierKind.ICN and correlation.status == HISTORICAL_STATUS:
                historical.append(correlation.value)
                continue
            if not correlation.is_active:
                continue
            identifiers.setdefault(correlation.kind, correlation.value)
            if correlation.kind is IdentifierKind.ICN:
                icn_with_aaid = correlation.with_authority

        for element in locate_all(registration, PRIOR_REGISTRATION_ID_PATH):
            correlation = _correlation_id(element)
            if correlation is not None and correlation.kind is IdentifierKind.ICN:
                historical.append(correlation.value)

        given, family = _legal_name(person)
        return Profile(
            identifiers=identifiers,
            historical_icns=tuple(dict.fromkeys(historical)),
            icn_with_aaid=icn_with_aaid,
            given_names=given,
            family_name=family,
            birth_date=_birth_date(person),
            gender=_attribute(person, ("administrativeGenderCode",), "code"),
            ssn=_ssn(person),
        )

    def parse(self) -> RegistryReply:
        status = self.ack_status
        profile = self.parse_profile() if status is AckStatus.SUCCESS else None
        return RegistryReply(ack=status, ack_code=self.code, profile=profile)


class MPIResponseDecoder:
    """``ResponseDecoder`` for MPI SOAP documents."""

    def decode(self, raw: RawResponse, *, kind: RequestKind) -> RegistryReply:
        match kind:
            case RequestKind.SEARCH:
                return ProfileParser(raw.body).parse()
            case RequestKind.ENROLL:
                return AddParser(raw.body).parse()


def _correlation_id(element: ET.Element) -> CorrelationId | None:
    extension = element.get("extension")
    if not extension:
        return None
    return CorrelationId.parse(extension)


def _attribute(element: ET.Element | None, path: ElementPath, name: str) -> str | None:
    found = locate(element, path)
    return found.get(name) if found is not None else None


def _legal_name(person: ET.Element | None) -> tuple[tuple[str, ...], str | None]:
    names = locate_all(person, ("name",))
    if not names:
        return (), None
    legal = next((name for name in names if name.get("use") == LEGAL_NAME_USE), names[0])
    given = tuple(
        name for element in legal.findall("given") if (name := (element.text or "").strip())
    )
    family = (legal.findtext("family") or "").strip() or None
    return given, family


def _birth_date(person: ET.Element | None) -> date | None:
    value = _attribute(person, ("birthTime",), "value")
    if not value:
        return None
    try:
        return datetime.strptime(value[:8], BIRTH_TIME_FORMAT).date()  # noqa: DTZ007
    except ValueError:
        log.warning("Ignoring malformed MPI birth time: %s", value)
        return None


def _ssn(person: ET.Element | None) -> str | None:
    for element in locate_all(person, OTHER_ID_PATH):
        if element.get("root") == SSN_ROOT:
            return element.get("extension")
    return None
