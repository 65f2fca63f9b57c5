"""
In-memory collaborators.

Used by the CLI demo and the test suite. In production these are backed by
the tenant-scoped database repositories, a Google Calendar client and the
payment gateway.
"""

import copy
import logging
import threading
import uuid
from datetime import date, datetime
from typing import Any, Iterable, Optional, TypedDict

from storefront.schemas.checkout_schema import CheckoutSession
from storefront.schemas.idempotency_schema import (
    IdempotencyRecord,
    InsertResult,
    StoredResponse,
)
from storefront.utils import DateLike, parse_calendar_date, utc_now

logger = logging.getLogger(__name__)


class BlackoutEntry(TypedDict, total=False):
    """A blackout as listed to the admin dashboard."""

    date: str
    reason: str


class InMemoryBlackoutRepository:
    """Blackout dates keyed by day, each with an optional operator note."""

    def __init__(self) -> None:
        self._blackouts: dict[date, Optional[str]] = {}

    def add_blackout(self, day: DateLike, reason: Optional[str] = None) -> None:
        target = parse_calendar_date(day)
        self._blackouts[target] = reason
        logger.info("Blackout added: %s (%s)", target, reason or "no reason")

    def delete_blackout(self, day: DateLike) -> bool:
        target = parse_calendar_date(day)
        if target not in self._blackouts:
            return False
        del self._blackouts[target]
        return True

    def is_blackout(self, day: date) -> bool:
        return day in self._blackouts

    def get_all_blackouts(self) -> list[BlackoutEntry]:
        entries: list[BlackoutEntry] = []
        for day in sorted(self._blackouts):
            entry: BlackoutEntry = {"date": day.isoformat()}
            reason = self._blackouts[day]
            if reason:
                entry["reason"] = reason
            entries.append(entry)
        return entries


class InMemoryBookingRepository:
    """Confirmed bookings keyed by reference."""

    def __init__(self) -> None:
        self._bookings: dict[str, date] = {}

    def add_booking(self, event_date: DateLike, booking_ref: Optional[str] = None) -> str:
        ref = booking_ref or f"BK-{uuid.uuid4().hex[:6].upper()}"
        self._bookings[ref] = parse_calendar_date(event_date)
        logger.info("Booking recorded: %s on %s", ref, self._bookings[ref])
        return ref

    def cancel_booking(self, booking_ref: str) -> bool:
        return self._bookings.pop(booking_ref, None) is not None

    def has_booking_on(self, day: date) -> bool:
        return day in self._bookings.values()

    def get_booked_dates(self, start: date, end: date) -> list[date]:
        return sorted({d for d in self._bookings.values() if start <= d <= end})


class StaticCalendarProvider:
    """External calendar stand-in with a fixed set of busy days."""

    def __init__(self, busy_dates: Iterable[DateLike] = ()) -> None:
        self._busy: set[date] = set()
        self.set_busy_dates(busy_dates)

    def set_busy_dates(self, busy_dates: Iterable[DateLike]) -> None:
        self._busy = {parse_calendar_date(d) for d in busy_dates}

    def is_busy(self, day: date) -> bool:
        return day in self._busy


class InMemoryKeyStore:
    """Process-local idempotency key store.

    All operations take one lock, which makes ``insert_if_absent`` atomic
    across threads in this process. Multi-process deployments need
    ``SqlKeyStore``.
    """

    def __init__(self) -> None:
        self._records: dict[str, IdempotencyRecord] = {}
        self._lock = threading.Lock()

    def insert_if_absent(self, key: str, expires_at: datetime) -> InsertResult:
        with self._lock:
            if key in self._records:
                return InsertResult(created=False)
            self._records[key] = IdempotencyRecord(
                key=key, response=None, expires_at=expires_at, created_at=utc_now()
            )
            return InsertResult(created=True)

    def find(self, key: str) -> Optional[IdempotencyRecord]:
        with self._lock:
            record = self._records.get(key)
            return record.model_copy(deep=True) if record is not None else None

    def update(self, key: str, response: StoredResponse) -> bool:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return False
            self._records[key] = record.model_copy(update={"response": copy.deepcopy(response)})
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class FakePaymentProvider:
    """Payment gateway stand-in that records every session it opens."""

    def __init__(self, base_url: str = "https://checkout.example.com/pay") -> None:
        self.base_url = base_url
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def create_checkout_session(
        self,
        *,
        amount_cents: int,
        email: str,
        metadata: dict[str, Any],
        idempotency_key: str,
    ) -> CheckoutSession:
        session_id = f"cs_{uuid.uuid4().hex[:12]}"
        with self._lock:
            self.calls.append(
                {
                    "amount_cents": amount_cents,
                    "email": email,
                    "metadata": dict(metadata),
                    "idempotency_key": idempotency_key,
                    "session_id": session_id,
                }
            )
        logger.info("Checkout session opened: %s for %s", session_id, email)
        return CheckoutSession(session_id=session_id, url=f"{self.base_url}/{session_id}")
