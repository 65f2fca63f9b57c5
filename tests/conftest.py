"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from storefront.adapters.memory import (
    FakePaymentProvider,
    InMemoryBlackoutRepository,
    InMemoryBookingRepository,
    InMemoryKeyStore,
    StaticCalendarProvider,
)
from storefront.schemas.checkout_schema import CheckoutRequest
from storefront.services.availability import AvailabilityResolver
from storefront.services.checkout import CheckoutService
from storefront.services.idempotency import IdempotencyKeyService

# 2023-11-14T22:13:20Z, i.e. epoch ms 1700000000000
EPOCH_START = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, now: datetime = EPOCH_START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingCollaborator:
    """Availability collaborator that records every day it was asked about."""

    def __init__(self, answer: bool = False, error: Optional[Exception] = None) -> None:
        self.answer = answer
        self.error = error
        self.calls: list[date] = []

    def _respond(self, day: date) -> bool:
        self.calls.append(day)
        if self.error is not None:
            raise self.error
        return self.answer

    def is_blackout(self, day: date) -> bool:
        return self._respond(day)

    def has_booking_on(self, day: date) -> bool:
        return self._respond(day)

    def get_booked_dates(self, start: date, end: date) -> list[date]:
        if self.error is not None:
            raise self.error
        return []

    def is_busy(self, day: date) -> bool:
        return self._respond(day)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def blackouts():
    return InMemoryBlackoutRepository()


@pytest.fixture
def bookings():
    return InMemoryBookingRepository()


@pytest.fixture
def calendar():
    return StaticCalendarProvider()


@pytest.fixture
def resolver(blackouts, bookings, calendar):
    return AvailabilityResolver(blackouts, bookings, calendar)


@pytest.fixture
def key_store():
    return InMemoryKeyStore()


@pytest.fixture
def idempotency(key_store, clock):
    return IdempotencyKeyService(
        key_store,
        ttl=timedelta(hours=24),
        checkout_window_seconds=10,
        clock=clock,
    )


@pytest.fixture
def payments():
    return FakePaymentProvider()


@pytest.fixture
def checkout(resolver, idempotency, payments, clock):
    return CheckoutService(
        resolver, idempotency, payments, clock=clock, duplicate_wait_ms=0
    )


def make_checkout_request(**overrides: Any) -> CheckoutRequest:
    """Helper to create a CheckoutRequest with sensible defaults."""
    data: dict[str, Any] = {
        "tenant_id": "tenant_123",
        "email": "a@b.com",
        "package_id": "pkg_basic",
        "event_date": "2025-07-01",
        "couple_name": "Jordan & Sam",
        "amount_cents": 250000,
        "add_on_ids": [],
    }
    data.update(overrides)
    return CheckoutRequest(**data)
