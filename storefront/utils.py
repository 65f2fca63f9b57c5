"""Shared utilities used across the storefront core."""

import re
from datetime import date, datetime, timezone
from typing import Union

from storefront.errors import InvalidDateError

DateLike = Union[date, str]

_CALENDAR_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_calendar_date(value: DateLike) -> date:
    """Coerce a ``date`` or ``YYYY-MM-DD`` string into a calendar day.

    Datetimes are rejected rather than silently truncated.

    Examples:
        >>> parse_calendar_date("2025-07-01")
        datetime.date(2025, 7, 1)
    """
    if isinstance(value, datetime):
        raise InvalidDateError(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value)
    text = value.strip()
    if not _CALENDAR_DATE_RE.match(text):
        raise InvalidDateError(value)
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(value) from None


def format_calendar_date(value: date) -> str:
    return value.isoformat()


def normalize_email(value: str) -> str:
    """Lower-case and trim an email so key derivation ignores casing.

    Examples:
        >>> normalize_email("  Jane@Example.COM ")
        'jane@example.com'
    """
    return value.strip().lower()


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
