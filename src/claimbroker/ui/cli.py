from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from claimbroker.app import enroll_subject, resolve_subject
from claimbroker.config import configure_logging
from claimbroker.domain.identity import AlreadyPresent, Enrolled
from claimbroker.domain.model import Error, Found, NotFound, Subject

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _add_subject_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--first-name", type=str, required=True, help="Given name")
    parser.add_argument("--middle-name", type=str, help="Optional middle name")
    parser.add_argument("--last-name", type=str, required=True, help="Family name")
    parser.add_argument(
        "--birth-date",
        type=str,
        required=True,
        help="ISO-8601 birth date (YYYY-MM-DD)",
    )
    parser.add_argument("--ssn", type=str, required=True, help="Social security number")
    parser.add_argument("--gender", type=str, choices=("M", "F"), help="Administrative gender")
    parser.add_argument("--icn", type=str, help="Known ICN; skips the demographic search")
    parser.add_argument("--birls-id", type=str, help="Existing BIRLS id")
    parser.add_argument("--participant-id", type=str, help="Existing participant id")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Resolve and enroll people in the MPI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser("resolve", help="Look up a person's MPI profile")
    _add_subject_arguments(resolve)

    enroll = subparsers.add_parser("enroll", help="Find a person or enroll them in the MPI")
    _add_subject_arguments(enroll)

    return parser.parse_args(list(argv))


def _parse_birth_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _build_subject(args: argparse.Namespace) -> Subject:
    given = (args.first_name, args.middle_name) if args.middle_name else (args.first_name,)
    return Subject(
        given_names=given,
        family_name=args.last_name,
        birth_date=_parse_birth_date(args.birth_date),
        ssn=args.ssn.replace("-", ""),
        gender=args.gender,
        icn=args.icn,
        birls_id=args.birls_id,
        participant_id=args.participant_id,
    )


def _run(command: str, subject: Subject) -> int:
    if command == "resolve":
        match resolve_subject(subject):
            case Found(profile):
                log.info("Found profile: icn=%s birls_id=%s", profile.icn, profile.birls_id)
                return 0
            case NotFound():
                log.info("No MPI profile matches the subject")
                return 0
            case Error(cause):
                log.error("MPI lookup failed: %s", cause)
                return 1

    if command == "enroll":
        match enroll_subject(subject):
            case AlreadyPresent(profile):
                log.info("Already present: icn=%s", profile.icn)
                return 0
            case Enrolled(codes):
                log.info("Enrolled with identifiers %s", codes.as_dict())
                return 0
            case Error(cause):
                log.error("MPI enrollment failed: %s", cause)
                return 1

    raise ValueError(f"Unsupported command: {command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        subject = _build_subject(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        status = _run(parsed_args.command, subject)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)
    if status:
        sys.exit(status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
