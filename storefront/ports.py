"""
Collaborator interfaces consumed by the core services.

The persistence layer, the external calendar integration and the payment
gateway implement these. Services receive instances through their
constructors and never build them on their own.
"""

from datetime import date, datetime
from typing import Any, Callable, Optional, Protocol

from storefront.schemas.checkout_schema import CheckoutSession
from storefront.schemas.idempotency_schema import (
    IdempotencyRecord,
    InsertResult,
    StoredResponse,
)

# Returns the current time as an aware UTC datetime.
Clock = Callable[[], datetime]


class BlackoutRepository(Protocol):
    """Operator-designated days on which bookings are disallowed."""

    def is_blackout(self, day: date) -> bool: ...


class BookingRepository(Protocol):
    """Confirmed bookings."""

    def has_booking_on(self, day: date) -> bool: ...

    def get_booked_dates(self, start: date, end: date) -> list[date]:
        """All booked days between ``start`` and ``end`` inclusive."""
        ...


class CalendarProvider(Protocol):
    """External scheduling calendar (e.g. Google Calendar)."""

    def is_busy(self, day: date) -> bool: ...


class KeyStore(Protocol):
    """
    Storage for idempotency records.

    ``insert_if_absent`` must be atomic: when several callers insert the
    same key concurrently, exactly one sees ``created=True``. Implementations
    may instead raise ``DuplicateKeyError`` for the losers.
    """

    def insert_if_absent(self, key: str, expires_at: datetime) -> InsertResult: ...

    def find(self, key: str) -> Optional[IdempotencyRecord]: ...

    def update(self, key: str, response: StoredResponse) -> bool:
        """Attach ``response``. Returns False when no record exists for ``key``."""
        ...

    def delete(self, key: str) -> None: ...


class PaymentProvider(Protocol):
    """Payment gateway that opens hosted checkout sessions."""

    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        email: str,
        metadata: dict[str, Any],
        idempotency_key: str,
    ) -> CheckoutSession: ...
