"""
Date availability resolution.

A date is checked against three sources in a fixed order and the first
one that reports the date as taken decides the reason:

    1. Blackout dates   (operator intent, never overridden by a booking)
    2. Confirmed bookings
    3. External calendar busy signal

Usage:
    resolver = AvailabilityResolver(blackouts, bookings, calendar)
    result = resolver.check_availability("2025-07-01")
    result.to_payload()  # {"date": "2025-07-01", "available": False, "reason": "blackout"}
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable

from storefront.errors import AvailabilityCheckError
from storefront.logging_context import get_request_logger
from storefront.ports import BlackoutRepository, BookingRepository, CalendarProvider
from storefront.schemas.availability_schema import (
    AvailabilityResult,
    AvailabilitySource,
    UnavailabilityReason,
    UnavailableDates,
)
from storefront.utils import DateLike, format_calendar_date, parse_calendar_date

logger = get_request_logger(__name__)


@dataclass(frozen=True)
class AvailabilityCheck:
    """One step in the resolution chain."""
    source: AvailabilitySource
    reason: UnavailabilityReason
    is_unavailable: Callable[[date], bool]


class AvailabilityResolver:
    """
    Resolves whether a calendar day can be booked.

    Checks run in ``UnavailabilityReason`` priority order with early
    return, so a lower-priority collaborator is never queried once a
    higher-priority one has blocked the date. Collaborator failures are
    wrapped in ``AvailabilityCheckError`` and never retried here.
    """

    def __init__(
        self,
        blackouts: BlackoutRepository,
        bookings: BookingRepository,
        calendar: CalendarProvider,
    ) -> None:
        self._bookings = bookings
        self.checks: tuple[AvailabilityCheck, ...] = (
            AvailabilityCheck(
                AvailabilitySource.BLACKOUTS, UnavailabilityReason.BLACKOUT, blackouts.is_blackout
            ),
            AvailabilityCheck(
                AvailabilitySource.BOOKINGS, UnavailabilityReason.BOOKED, bookings.has_booking_on
            ),
            AvailabilityCheck(
                AvailabilitySource.CALENDAR, UnavailabilityReason.CALENDAR_BUSY, calendar.is_busy
            ),
        )

    def check_availability(self, day: DateLike) -> AvailabilityResult:
        """Check a single day. Accepts a ``date`` or a ``YYYY-MM-DD`` string.

        Raises:
            InvalidDateError: If ``day`` is not a valid calendar date.
            AvailabilityCheckError: If a collaborator fails.
        """
        target = parse_calendar_date(day)

        for check in self.checks:
            try:
                blocked = check.is_unavailable(target)
            except Exception as exc:
                logger.warning(
                    "Availability source %s failed for %s: %s",
                    check.source.value, target, exc,
                )
                raise AvailabilityCheckError(check.source, target, str(exc)) from exc

            if blocked:
                logger.info("Date %s unavailable: %s", target, check.reason.value)
                return AvailabilityResult.blocked(target, check.reason)

        logger.debug("Date %s available", target)
        return AvailabilityResult.free(target)

    def get_unavailable_dates(self, start: DateLike, end: DateLike) -> UnavailableDates:
        """Booked days between ``start`` and ``end`` inclusive, in one repository query.

        Only bookings are consulted; blackouts and the external calendar
        still need ``check_availability`` for a definitive answer.
        """
        first = parse_calendar_date(start)
        last = parse_calendar_date(end)
        if first > last:
            raise ValueError(f"Range start {first} is after end {last}")

        try:
            booked = self._bookings.get_booked_dates(first, last)
        except Exception as exc:
            logger.warning("Booked-date lookup failed for %s..%s: %s", first, last, exc)
            raise AvailabilityCheckError(AvailabilitySource.BOOKINGS, None, str(exc)) from exc

        dates = sorted({format_calendar_date(d) for d in booked if first <= d <= last})
        return UnavailableDates(start=first, end=last, dates=dates)
