"""Tests for date availability resolution."""

from datetime import date

import pytest

from storefront.errors import AvailabilityCheckError, InvalidDateError
from storefront.schemas.availability_schema import AvailabilitySource, UnavailabilityReason
from storefront.services.availability import AvailabilityResolver
from tests.conftest import RecordingCollaborator

DAY = "2025-07-01"


class TestCheckAvailability:
    def test_free_date_is_available_without_reason(self, resolver):
        result = resolver.check_availability(DAY)
        assert result.available is True
        assert result.reason is None
        assert result.to_payload() == {"date": DAY, "available": True}

    def test_accepts_date_objects(self, resolver):
        result = resolver.check_availability(date(2025, 7, 1))
        assert result.date == date(2025, 7, 1)

    def test_blackout(self, resolver, blackouts):
        blackouts.add_blackout(DAY, "Holiday")
        result = resolver.check_availability(DAY)
        assert result.available is False
        assert result.reason == UnavailabilityReason.BLACKOUT

    def test_booked(self, resolver, bookings):
        bookings.add_booking(DAY)
        result = resolver.check_availability(DAY)
        assert result.to_payload() == {"date": DAY, "available": False, "reason": "booked"}

    def test_calendar_busy(self, resolver, calendar):
        calendar.set_busy_dates([DAY])
        result = resolver.check_availability(DAY)
        assert result.to_payload() == {"date": DAY, "available": False, "reason": "calendar"}

    def test_other_dates_unaffected(self, resolver, bookings):
        bookings.add_booking("2025-07-02")
        assert resolver.check_availability(DAY).available is True

    def test_cancelled_booking_frees_date(self, resolver, bookings):
        ref = bookings.add_booking(DAY)
        bookings.cancel_booking(ref)
        assert resolver.check_availability(DAY).available is True


class TestPriority:
    """Overlapping unavailability sources resolve to the highest-priority reason."""

    def test_blackout_beats_booking(self, resolver, blackouts, bookings):
        blackouts.add_blackout(DAY, "Holiday")
        bookings.add_booking(DAY)
        assert resolver.check_availability(DAY).to_payload() == {
            "date": DAY,
            "available": False,
            "reason": "blackout",
        }

    def test_booking_beats_calendar(self, resolver, bookings, calendar):
        bookings.add_booking(DAY)
        calendar.set_busy_dates([DAY])
        assert resolver.check_availability(DAY).reason == UnavailabilityReason.BOOKED

    def test_blackout_beats_everything(self, resolver, blackouts, bookings, calendar):
        blackouts.add_blackout(DAY)
        bookings.add_booking(DAY)
        calendar.set_busy_dates([DAY])
        assert resolver.check_availability(DAY).reason == UnavailabilityReason.BLACKOUT

    def test_checks_follow_reason_priority(self, resolver):
        reasons = tuple(check.reason for check in resolver.checks)
        assert reasons == UnavailabilityReason.priority()

    def test_short_circuits_after_blackout(self):
        blackout = RecordingCollaborator(answer=True)
        booking = RecordingCollaborator()
        cal = RecordingCollaborator()
        AvailabilityResolver(blackout, booking, cal).check_availability(DAY)
        assert blackout.calls == [date(2025, 7, 1)]
        assert booking.calls == []
        assert cal.calls == []

    def test_short_circuits_after_booking(self):
        blackout = RecordingCollaborator()
        booking = RecordingCollaborator(answer=True)
        cal = RecordingCollaborator()
        AvailabilityResolver(blackout, booking, cal).check_availability(DAY)
        assert len(booking.calls) == 1
        assert cal.calls == []


class TestFailures:
    def test_calendar_failure_names_source(self):
        timeout = TimeoutError("calendar API timed out")
        resolver = AvailabilityResolver(
            RecordingCollaborator(), RecordingCollaborator(), RecordingCollaborator(error=timeout)
        )
        with pytest.raises(AvailabilityCheckError, match="calendar_provider") as exc_info:
            resolver.check_availability(DAY)
        assert exc_info.value.source == AvailabilitySource.CALENDAR
        assert exc_info.value.date == date(2025, 7, 1)
        assert exc_info.value.__cause__ is timeout

    def test_blackout_failure_skips_later_checks(self):
        booking = RecordingCollaborator()
        resolver = AvailabilityResolver(
            RecordingCollaborator(error=RuntimeError("db down")), booking, RecordingCollaborator()
        )
        with pytest.raises(AvailabilityCheckError) as exc_info:
            resolver.check_availability(DAY)
        assert exc_info.value.source == AvailabilitySource.BLACKOUTS
        assert booking.calls == []

    def test_booking_failure_names_source(self):
        resolver = AvailabilityResolver(
            RecordingCollaborator(),
            RecordingCollaborator(error=ConnectionError("reset")),
            RecordingCollaborator(),
        )
        with pytest.raises(AvailabilityCheckError) as exc_info:
            resolver.check_availability(DAY)
        assert exc_info.value.source == AvailabilitySource.BOOKINGS

    @pytest.mark.parametrize(
        "value", ["2025-13-01", "07/01/2025", "", "2025-7-1", "2025-W27-2", "20250701", None]
    )
    def test_invalid_date_rejected_before_lookups(self, value):
        blackout = RecordingCollaborator()
        resolver = AvailabilityResolver(blackout, RecordingCollaborator(), RecordingCollaborator())
        with pytest.raises(InvalidDateError):
            resolver.check_availability(value)
        assert blackout.calls == []


class TestUnavailableDates:
    def test_lists_booked_dates_in_range(self, resolver, bookings):
        bookings.add_booking("2025-06-29")
        bookings.add_booking("2025-07-15")
        bookings.add_booking("2025-07-04")
        bookings.add_booking("2025-08-01")
        result = resolver.get_unavailable_dates("2025-07-01", "2025-07-31")
        assert result.dates == ["2025-07-04", "2025-07-15"]

    def test_range_is_inclusive(self, resolver, bookings):
        bookings.add_booking("2025-07-01")
        bookings.add_booking("2025-07-31")
        result = resolver.get_unavailable_dates("2025-07-01", "2025-07-31")
        assert result.dates == ["2025-07-01", "2025-07-31"]

    def test_inverted_range_rejected(self, resolver):
        with pytest.raises(ValueError, match="after end"):
            resolver.get_unavailable_dates("2025-08-01", "2025-07-01")

    def test_repository_failure_wrapped(self):
        resolver = AvailabilityResolver(
            RecordingCollaborator(),
            RecordingCollaborator(error=RuntimeError("db down")),
            RecordingCollaborator(),
        )
        with pytest.raises(AvailabilityCheckError) as exc_info:
            resolver.get_unavailable_dates("2025-07-01", "2025-07-31")
        assert exc_info.value.source == AvailabilitySource.BOOKINGS
