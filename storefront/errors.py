"""Exception hierarchy for the availability and checkout core."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from storefront.schemas.availability_schema import (
        AvailabilitySource,
        UnavailabilityReason,
    )


class StorefrontError(Exception):
    """Base class for all errors raised by this package."""


class InvalidDateError(StorefrontError, ValueError):
    """Raised when a calendar date is not a valid ``YYYY-MM-DD`` value."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid calendar date {value!r}, expected YYYY-MM-DD")
        self.value = value


class AvailabilityCheckError(StorefrontError):
    """A collaborator failed while resolving availability.

    ``source`` names the collaborator so callers can log and alert on the
    specific dependency. The original exception is chained as ``__cause__``.
    """

    def __init__(self, source: AvailabilitySource, day: Optional[date], detail: str = "") -> None:
        message = f"Availability check failed in {source.value}"
        if day is not None:
            message += f" for {day.isoformat()}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.source = source
        self.date = day


class DateUnavailableError(StorefrontError):
    """Raised by the checkout flow when the event date cannot be booked."""

    def __init__(self, day: date, reason: UnavailabilityReason) -> None:
        super().__init__(f"Date {day.isoformat()} is unavailable ({reason.value})")
        self.date = day
        self.reason = reason


class IdempotencyError(StorefrontError):
    """Base class for idempotency key store problems."""


class DuplicateKeyError(IdempotencyError):
    """A key store rejected an insert because the key already exists.

    Only key stores raise this. ``IdempotencyKeyService.check_and_store``
    turns it into a ``False`` return.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Idempotency key already exists: {key}")
        self.key = key


class KeyNotFoundError(IdempotencyError):
    """Raised when updating a key that was never stored."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Idempotency key not found: {key}")
        self.key = key


class IdempotencyConflictError(IdempotencyError):
    """A duplicate checkout is in flight and has no response to replay yet."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Checkout already in progress for key {key}")
        self.key = key
