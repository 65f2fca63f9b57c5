"""Availability result models and the unavailability priority order."""

from datetime import date as CalendarDate
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, model_validator


class UnavailabilityReason(str, Enum):
    """Why a date cannot be booked.

    Declaration order is priority order: a blackout outranks a booking,
    and a booking outranks a busy external calendar.
    """
    BLACKOUT = "blackout"
    BOOKED = "booked"
    CALENDAR_BUSY = "calendar"

    @classmethod
    def priority(cls) -> tuple["UnavailabilityReason", ...]:
        """Reasons from highest to lowest priority."""
        return tuple(cls)

    @property
    def rank(self) -> int:
        return self.priority().index(self)


class AvailabilitySource(str, Enum):
    """The collaborator consulted for a check, used in error reporting."""
    BLACKOUTS = "blackout_repository"
    BOOKINGS = "booking_repository"
    CALENDAR = "calendar_provider"


class AvailabilityResult(BaseModel):
    """Outcome of checking a single calendar day."""

    model_config = {"frozen": True}

    date: CalendarDate
    available: bool
    reason: Optional[UnavailabilityReason] = None

    @model_validator(mode="after")
    def _reason_matches_availability(self) -> "AvailabilityResult":
        if self.available and self.reason is not None:
            raise ValueError("reason must be omitted when the date is available")
        if not self.available and self.reason is None:
            raise ValueError("reason is required when the date is unavailable")
        return self

    @classmethod
    def free(cls, day: CalendarDate) -> "AvailabilityResult":
        return cls(date=day, available=True)

    @classmethod
    def blocked(cls, day: CalendarDate, reason: UnavailabilityReason) -> "AvailabilityResult":
        return cls(date=day, available=False, reason=reason)

    def to_payload(self) -> dict[str, Any]:
        """HTTP response shape: ``reason`` only appears when unavailable."""
        payload: dict[str, Any] = {
            "date": self.date.isoformat(),
            "available": self.available,
        }
        if self.reason is not None:
            payload["reason"] = self.reason.value
        return payload


class UnavailableDates(BaseModel):
    """Booked dates in a range, for disabling days in a date picker."""

    start: CalendarDate
    end: CalendarDate
    dates: list[str]
