"""Tests for shared utility functions."""

from datetime import date, datetime, timezone

import pytest

from storefront.errors import InvalidDateError
from storefront.utils import format_calendar_date, normalize_email, parse_calendar_date, utc_now


class TestParseCalendarDate:
    def test_parses_iso_string(self):
        assert parse_calendar_date("2025-07-01") == date(2025, 7, 1)

    def test_strips_whitespace(self):
        assert parse_calendar_date(" 2025-07-01 ") == date(2025, 7, 1)

    def test_passes_dates_through(self):
        assert parse_calendar_date(date(2025, 7, 1)) == date(2025, 7, 1)

    def test_rejects_datetimes(self):
        with pytest.raises(InvalidDateError):
            parse_calendar_date(datetime(2025, 7, 1, 12, 0))

    @pytest.mark.parametrize(
        "value", ["2025-02-30", "2025-07-01T10:00", "tomorrow", 20250701, "2025-W27-2", "2025-182"]
    )
    def test_rejects_bad_values(self, value):
        with pytest.raises(InvalidDateError) as exc_info:
            parse_calendar_date(value)
        assert exc_info.value.value == value

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_calendar_date("nope")


class TestFormatting:
    def test_format_calendar_date(self):
        assert format_calendar_date(date(2025, 7, 1)) == "2025-07-01"

    def test_normalize_email(self):
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo == timezone.utc
