from __future__ import annotations

from datetime import date

import pytest

from claimbroker.adapters.mpi import AddParser, MPIResponseDecoder, ProfileParser, match_code_family
from claimbroker.adapters.mpi.parser import parse_document
from claimbroker.domain.model import AckStatus, IdentifierKind, RawResponse, RequestKind
from tests.helpers.identity import add_person_body, mpi_fixture


def test_parse_identifier_codes_reduces_family_codes_to_digits() -> None:
    codes = AddParser(add_person_body("BRLS123456A", "CORP654321")).parse_identifier_codes()

    assert dict(codes.ids) == {
        IdentifierKind.BIRLS_ID: "123456",
        IdentifierKind.PARTICIPANT_ID: "654321",
    }
    assert codes.other == ()
    assert codes.as_dict() == {"birls_id": "123456", "participant_id": "654321"}


def test_unrecognized_code_lands_in_residual_bucket_only() -> None:
    codes = AddParser(add_person_body("XYZ999")).parse_identifier_codes()

    assert dict(codes.ids) == {}
    assert codes.as_dict() == {"other": ["XYZ999"]}


def test_add_person_fixture_mixes_families_and_residual_codes() -> None:
    parser = AddParser(mpi_fixture("add_person_response.xml"))
    codes = parser.parse_identifier_codes()

    assert parser.ack_status is AckStatus.SUCCESS
    assert not parser.failed_or_invalid()
    assert codes.ids[IdentifierKind.BIRLS_ID] == "123456"
    assert codes.ids[IdentifierKind.PARTICIPANT_ID] == "654321"
    assert codes.other == ("XYZ999",)


def test_hl7_formatted_codes_are_matched_by_source_suffix() -> None:
    codes = AddParser(mpi_fixture("add_person_hl7_response.xml")).parse_identifier_codes()

    assert dict(codes.ids) == {
        IdentifierKind.BIRLS_ID: "111985523",
        IdentifierKind.PARTICIPANT_ID: "32397028",
    }
    assert codes.other == ()


def test_later_code_of_the_same_family_wins() -> None:
    codes = AddParser(add_person_body("BRLS111", "BRLS222")).parse_identifier_codes()

    assert codes.ids[IdentifierKind.BIRLS_ID] == "222"


def test_missing_body_yields_empty_codes() -> None:
    parser = AddParser(b"<Envelope><Body/></Envelope>")

    assert parser.parse_identifier_codes().is_empty
    assert parser.ack_status is AckStatus.UNKNOWN


def test_unparseable_document_yields_empty_codes() -> None:
    parser = AddParser(b"<html>Bad gateway")

    assert parse_document(b"<html>Bad gateway") is None
    assert parser.parse_identifier_codes().is_empty


def test_acknowledgement_without_detail_codes_is_empty() -> None:
    assert AddParser(add_person_body()).parse_identifier_codes().is_empty


@pytest.mark.parametrize(
    ("ack", "failed", "invalid"),
    [("AA", False, False), ("AR", True, False), ("AE", False, True)],
)
def test_failed_or_invalid_follows_acknowledgement_code(ack: str, failed: bool, invalid: bool) -> None:
    parser = AddParser(add_person_body(ack=ack))

    assert parser.failed_request() is failed
    assert parser.invalid_request() is invalid
    assert parser.failed_or_invalid() is (failed or invalid)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("BRLS123456A", (IdentifierKind.BIRLS_ID, "123456")),
        ("CORP654321", (IdentifierKind.PARTICIPANT_ID, "654321")),
        ("796122306^PI^200BRLS^USVBA", (IdentifierKind.BIRLS_ID, "796122306")),
        ("brls123456", None),
        ("BRLSABC", None),
        ("BRLS1^PI^200CORP^USVBA", None),
        ("XYZ999", None),
    ],
)
def test_match_code_family(raw: str, expected: tuple[IdentifierKind, str] | None) -> None:
    assert match_code_family(raw) == expected


def test_profile_parser_reads_active_identifiers_and_demographics() -> None:
    profile = ProfileParser(mpi_fixture("find_profile_response.xml")).parse_profile()

    assert profile is not None
    assert profile.icn == "1008714701V416111"
    assert profile.icn_with_aaid == "1008714701V416111^NI^200M^USVHA"
    assert profile.edipi == "1005079124"
    assert profile.birls_id == "796122306"
    assert profile.participant_id == "9100792239"
    assert profile.mhv_correlation_id == "1672157"
    assert profile.historical_icns == ("1008714701V416100", "1008714702V416222")
    assert profile.given_names == ("Mitchell", "G")
    assert profile.family_name == "Jenkins"
    assert profile.birth_date == date(1949, 3, 4)
    assert profile.gender == "M"
    assert profile.ssn == "796122306"


def test_profile_parser_returns_none_for_not_found_reply() -> None:
    parser = ProfileParser(mpi_fixture("find_profile_not_found_response.xml"))

    assert parser.ack_status is AckStatus.SUCCESS
    assert parser.not_found()
    assert parser.parse_profile() is None


@pytest.mark.parametrize(
    ("fixture", "status"),
    [
        ("find_profile_failure_response.xml", AckStatus.FAILURE),
        ("find_profile_invalid_response.xml", AckStatus.INVALID_REQUEST),
    ],
)
def test_profile_parser_skips_profile_on_error_acknowledgement(fixture: str, status: AckStatus) -> None:
    reply = ProfileParser(mpi_fixture(fixture)).parse()

    assert reply.ack is status
    assert reply.failed_or_invalid
    assert reply.profile is None


def test_decoder_dispatches_on_request_kind() -> None:
    decoder = MPIResponseDecoder()

    search = decoder.decode(
        RawResponse(200, mpi_fixture("find_profile_response.xml")), kind=RequestKind.SEARCH
    )
    enroll = decoder.decode(
        RawResponse(200, mpi_fixture("add_person_response.xml")), kind=RequestKind.ENROLL
    )

    assert search.profile is not None
    assert search.identifier_codes.is_empty
    assert enroll.profile is None
    assert enroll.identifier_codes.ids[IdentifierKind.BIRLS_ID] == "123456"
