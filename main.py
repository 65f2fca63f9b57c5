"""
Command-line entry point for the storefront core.

Runs availability checks and derives checkout keys against in-memory
collaborators, which is handy when reproducing a customer report.

Usage:
    python main.py availability 2025-07-01 --blackout 2025-07-01:Holiday --booked 2025-07-01
    python main.py unavailable 2025-07-01 2025-07-31 --booked 2025-07-04
    python main.py checkout-key tenant_123 a@b.com pkg_basic 2025-07-01 --timestamp-ms 1700000000000
"""

import argparse
import json
import logging
import sys
import time
from typing import Optional

from storefront.adapters.memory import (
    InMemoryBlackoutRepository,
    InMemoryBookingRepository,
    InMemoryKeyStore,
    StaticCalendarProvider,
)
from storefront.config import settings
from storefront.errors import StorefrontError
from storefront.services.availability import AvailabilityResolver
from storefront.services.idempotency import IdempotencyKeyService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect date availability and checkout idempotency keys."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    availability = commands.add_parser("availability", help="Check whether a date can be booked.")
    availability.add_argument("date", help="Date in YYYY-MM-DD format.")
    _add_calendar_state_args(availability)

    unavailable = commands.add_parser("unavailable", help="List booked dates in a range.")
    unavailable.add_argument("start", help="Range start in YYYY-MM-DD format.")
    unavailable.add_argument("end", help="Range end in YYYY-MM-DD format (inclusive).")
    _add_calendar_state_args(unavailable)

    checkout_key = commands.add_parser("checkout-key", help="Derive a checkout idempotency key.")
    checkout_key.add_argument("tenant_id")
    checkout_key.add_argument("email")
    checkout_key.add_argument("package_id")
    checkout_key.add_argument("event_date")
    checkout_key.add_argument(
        "--timestamp-ms",
        type=int,
        default=None,
        help="Submission time in epoch milliseconds (default: now).",
    )
    return parser


def _add_calendar_state_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--blackout",
        action="append",
        default=[],
        metavar="DATE[:REASON]",
        help="Blackout date, optionally with a reason. Repeatable.",
    )
    parser.add_argument(
        "--booked", action="append", default=[], metavar="DATE", help="Booked date. Repeatable."
    )
    parser.add_argument(
        "--busy",
        action="append",
        default=[],
        metavar="DATE",
        help="Date the external calendar reports as busy. Repeatable.",
    )


def _build_resolver(args: argparse.Namespace) -> AvailabilityResolver:
    blackouts = InMemoryBlackoutRepository()
    for entry in args.blackout:
        day, _, reason = entry.partition(":")
        blackouts.add_blackout(day, reason or None)

    bookings = InMemoryBookingRepository()
    for day in args.booked:
        bookings.add_booking(day)

    return AvailabilityResolver(blackouts, bookings, StaticCalendarProvider(args.busy))


def run(args: argparse.Namespace) -> dict:
    """Execute a parsed command and return its JSON-serializable output."""
    if args.command == "availability":
        return _build_resolver(args).check_availability(args.date).to_payload()

    if args.command == "unavailable":
        result = _build_resolver(args).get_unavailable_dates(args.start, args.end)
        return {"start": result.start.isoformat(), "end": result.end.isoformat(), "dates": result.dates}

    service = IdempotencyKeyService(InMemoryKeyStore())
    timestamp_ms = args.timestamp_ms if args.timestamp_ms is not None else int(time.time() * 1000)
    key = service.generate_checkout_key(
        args.tenant_id, args.email, args.package_id, args.event_date, timestamp_ms
    )
    return {"key": key, "bucket_ms": service.bucket_timestamp(timestamp_ms)}


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        output = run(args)
    except (StorefrontError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1

    sys.stdout.write(json.dumps(output) + "\n")
    logger.debug("%s completed for %s", args.command, settings.service_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
