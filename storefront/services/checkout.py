"""
Checkout orchestration with at-most-once payment session creation.

Flow for one submission:
    1. Derive the checkout key from tenant, email, package, event date
       and the bucketed submission time.
    2. Replay the stored response if this attempt already finished.
    3. Verify the event date is still available.
    4. Claim the key. The winner opens the payment session and stores
       the response for later duplicates.
    5. A duplicate that lost the claim waits briefly and replays the
       winner's response, or is rejected if none is stored yet.
"""

import time
from datetime import datetime
from typing import Callable, Optional

from storefront.config import settings
from storefront.errors import DateUnavailableError, IdempotencyConflictError
from storefront.logging_context import get_request_logger, set_tenant_id
from storefront.ports import Clock, PaymentProvider
from storefront.schemas.checkout_schema import CheckoutRequest, CheckoutResult
from storefront.services.availability import AvailabilityResolver
from storefront.services.idempotency import IdempotencyKeyService
from storefront.utils import utc_now

logger = get_request_logger(__name__)


def _to_epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class CheckoutService:
    """Opens payment sessions for bookings, deduplicating repeated submissions."""

    def __init__(
        self,
        availability: AvailabilityResolver,
        idempotency: IdempotencyKeyService,
        payments: PaymentProvider,
        clock: Clock = utc_now,
        duplicate_wait_ms: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._availability = availability
        self._idempotency = idempotency
        self._payments = payments
        self._clock = clock
        self._sleep = sleep
        self.duplicate_wait_ms = (
            duplicate_wait_ms
            if duplicate_wait_ms is not None
            else settings.checkout.duplicate_wait_ms
        )

    def create_checkout(self, request: CheckoutRequest) -> CheckoutResult:
        """Create (or replay) the checkout session for ``request``.

        Raises:
            DateUnavailableError: If the event date is blacked out, booked or busy.
            AvailabilityCheckError: If an availability collaborator fails.
            IdempotencyConflictError: If a duplicate submission is still in flight.
        """
        set_tenant_id(request.tenant_id)
        key = self._idempotency.generate_checkout_key(
            request.tenant_id,
            request.email,
            request.package_id,
            request.event_date.isoformat(),
            _to_epoch_ms(self._clock()),
        )

        cached = self._idempotency.get_stored_response(key)
        if cached is not None:
            logger.info("Replaying stored checkout for key %s", key)
            return self._replay(key, cached)

        check = self._availability.check_availability(request.event_date)
        if check.reason is not None:
            raise DateUnavailableError(check.date, check.reason)

        if not self._idempotency.check_and_store(key):
            return self._wait_for_owner(key)

        metadata = {
            "tenant_id": request.tenant_id,
            "package_id": request.package_id,
            "event_date": request.event_date.isoformat(),
            "email": request.email,
            "couple_name": request.couple_name,
            "add_on_ids": list(request.add_on_ids),
        }
        session = self._payments.create_checkout_session(
            amount_cents=request.amount_cents,
            email=request.email,
            metadata=metadata,
            idempotency_key=key,
        )

        self._idempotency.update_response(
            key,
            {"data": session.model_dump(), "timestamp": self._clock().isoformat()},
        )
        logger.info("Checkout session %s created for key %s", session.session_id, key)
        return CheckoutResult(
            checkout_url=session.url,
            session_id=session.session_id,
            idempotency_key=key,
        )

    def _wait_for_owner(self, key: str) -> CheckoutResult:
        if self.duplicate_wait_ms > 0:
            self._sleep(self.duplicate_wait_ms / 1000)
        cached = self._idempotency.get_stored_response(key)
        if cached is None:
            logger.warning("Duplicate checkout for key %s has no stored response yet", key)
            raise IdempotencyConflictError(key)
        logger.info("Duplicate checkout for key %s resolved from stored response", key)
        return self._replay(key, cached)

    @staticmethod
    def _replay(key: str, cached: dict) -> CheckoutResult:
        data = cached["data"]
        return CheckoutResult(
            checkout_url=data["url"],
            session_id=data.get("session_id"),
            idempotency_key=key,
            replayed=True,
        )
