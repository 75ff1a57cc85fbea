"""Build MPI SOAP request documents for search and add-person interactions."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

from claimbroker.domain.model import RequestKind

from .schema import (
    ADD_PERSON_INTERACTION,
    BIRTH_TIME_FORMAT,
    HL7_NS,
    ICN_ROOT,
    IDM_NS,
    LEGAL_NAME_USE,
    SEARCH_REQUEST_INTERACTION,
    SOAP_ENV_NS,
    SSN_ROOT,
)

if TYPE_CHECKING:
    from claimbroker.config.mpi import MPIConfig
    from claimbroker.domain.model import RegistryRequest, Subject

ET.register_namespace("env", SOAP_ENV_NS)
ET.register_namespace("idm", IDM_NS)
ET.register_namespace("v3", HL7_NS)

_CREATION_TIME_FORMAT = "%Y%m%d%H%M%S"
_MESSAGE_ID_ROOT = "1.2.840.114350.1.13.0.1.7.1.1"
_ICN_QUERY_ID_TYPE = "^NI^200M^USVHA"


def _env(tag: str) -> str:
    return f"{{{SOAP_ENV_NS}}}{tag}"


def _idm(tag: str) -> str:
    return f"{{{IDM_NS}}}{tag}"


def _sub(parent: ET.Element, tag: str, text: str | None = None, **attrs: str) -> ET.Element:
    # bare names are HL7 payload elements
    qualified = tag if tag.startswith("{") else f"{{{HL7_NS}}}{tag}"
    element = ET.SubElement(parent, qualified, attrs)
    if text is not None:
        element.text = text
    return element


class MPIRequestBuilder:
    """Renders registry requests into SOAP envelopes."""

    def __init__(self, config: MPIConfig, *, clock: type[datetime] = datetime) -> None:
        self._config = config
        self._clock = clock

    @staticmethod
    def interaction_for(kind: RequestKind) -> str:
        match kind:
            case RequestKind.SEARCH:
                return SEARCH_REQUEST_INTERACTION
            case RequestKind.ENROLL:
                return ADD_PERSON_INTERACTION

    def build(self, request: RegistryRequest) -> bytes:
        interaction = self.interaction_for(request.kind)
        envelope = ET.Element(_env("Envelope"))
        _sub(envelope, _env("Header"))
        body = _sub(envelope, _env("Body"))
        message = _sub(body, _idm(interaction), ITSVersion="XML_1.0")
        self._header(message, interaction)

        match request.kind:
            case RequestKind.SEARCH:
                self._search_payload(message, request.subject)
            case RequestKind.ENROLL:
                self._add_person_payload(message, request.subject)

        return ET.tostring(envelope, encoding="utf-8", xml_declaration=True)

    def _header(self, message: ET.Element, interaction: str) -> None:
        _sub(message, "id", root=_MESSAGE_ID_ROOT, extension=f"MCID-{uuid4().hex}")
        _sub(
            message,
            "creationTime",
            value=self._clock.now(UTC).strftime(_CREATION_TIME_FORMAT),
        )
        _sub(message, "interactionId", root="2.16.840.1.113883.1.6", extension=interaction)
        _sub(message, "processingCode", code=self._config.processing_code)
        _sub(message, "processingModeCode", code="T")
        _sub(message, "acceptAckCode", code="AL")
        receiver = _sub(message, "receiver", typeCode="RCV")
        receiver_device = _sub(receiver, "device", classCode="DEV", determinerCode="INSTANCE")
        _sub(receiver_device, "id", root=ICN_ROOT, extension=self._config.receiver_id)
        sender = _sub(message, "sender", typeCode="SND")
        sender_device = _sub(sender, "device", classCode="DEV", determinerCode="INSTANCE")
        _sub(sender_device, "id", root=ICN_ROOT, extension=self._config.sender_id)

    def _search_payload(self, message: ET.Element, subject: Subject) -> None:
        control = _sub(message, "controlActProcess", classCode="CACT", moodCode="EVN")
        _sub(control, "code", code=SEARCH_REQUEST_INTERACTION, codeSystem="2.16.840.1.113883.1.6")
        query = _sub(control, "queryByParameter")
        _sub(query, "queryId", root="1.2.840.114350.1.13.28.1.18.5.999", extension=uuid4().hex)
        _sub(query, "statusCode", code="new")
        _sub(query, "modifyCode", code="MVI.COMP1")
        _sub(query, "initialQuantity", value="1")
        parameters = _sub(query, "parameterList")

        if subject.icn:
            _sub(parameters, "id", root=ICN_ROOT, extension=f"{subject.icn}{_ICN_QUERY_ID_TYPE}")
            return

        gender = _sub(parameters, "livingSubjectAdministrativeGender")
        if subject.gender:
            _sub(gender, "value", code=subject.gender)
        _sub(gender, "semanticsText", "Gender")

        birth = _sub(parameters, "livingSubjectBirthTime")
        _sub(birth, "value", value=subject.birth_date.strftime(BIRTH_TIME_FORMAT))
        _sub(birth, "semanticsText", "Date of Birth")

        subject_id = _sub(parameters, "livingSubjectId")
        _sub(subject_id, "value", root=SSN_ROOT, extension=subject.ssn)
        _sub(subject_id, "semanticsText", "SSN")

        name = _sub(parameters, "livingSubjectName")
        value = _sub(name, "value", use=LEGAL_NAME_USE)
        for given in subject.given_names:
            _sub(value, "given", given)
        _sub(value, "family", subject.family_name)
        _sub(name, "semanticsText", "Legal Name")

    def _add_person_payload(self, message: ET.Element, subject: Subject) -> None:
        control = _sub(message, "controlActProcess", classCode="CACT", moodCode="EVN")
        _sub(control, "dataEnterer", typeCode="ENT", contextControlCode="AP")
        event = _sub(_sub(control, "subject", typeCode="SUBJ"), "registrationEvent")
        _sub(event, "statusCode", code="active")
        patient = _sub(_sub(event, "subject1", typeCode="SBJ"), "patient", classCode="PAT")
        if subject.icn:
            _sub(patient, "id", root=ICN_ROOT, extension=f"{subject.icn}{_ICN_QUERY_ID_TYPE}^A")
        _sub(patient, "statusCode", code="active")

        person = _sub(patient, "patientPerson")
        name = _sub(person, "name", use=LEGAL_NAME_USE)
        for given in subject.given_names:
            _sub(name, "given", given)
        _sub(name, "family", subject.family_name)
        if subject.gender:
            _sub(person, "administrativeGenderCode", code=subject.gender)
        _sub(person, "birthTime", value=subject.birth_date.strftime(BIRTH_TIME_FORMAT))
        other_ids = _sub(person, "asOtherIDs", classCode="SSN")
        _sub(other_ids, "id", root=SSN_ROOT, extension=subject.ssn)
        _sub(other_ids, "scopingOrganization", classCode="ORG", determinerCode="INSTANCE")
