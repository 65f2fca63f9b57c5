"""
Idempotency keys for side-effecting operations such as checkout.

A key is a deterministic fingerprint of an operation's semantic inputs.
The first caller to store a key owns the operation; duplicates read the
response the owner stored instead of repeating the side effect.

Usage:
    service = IdempotencyKeyService(store)
    key = service.generate_checkout_key(tenant_id, email, package_id, event_date, now_ms)
    if service.check_and_store(key):
        response = do_checkout()
        service.update_response(key, response)
    else:
        response = service.get_stored_response(key)
"""

import hashlib
from datetime import timedelta
from typing import Optional

from storefront.config import settings
from storefront.errors import DuplicateKeyError, KeyNotFoundError
from storefront.logging_context import get_request_logger
from storefront.ports import Clock, KeyStore
from storefront.schemas.idempotency_schema import StoredResponse
from storefront.utils import utc_now

logger = get_request_logger(__name__)

DIGEST_LENGTH = settings.idempotency.digest_length
KEY_PART_SEPARATOR = ":"


class IdempotencyKeyService:
    """Derives idempotency keys and guards operations through a ``KeyStore``.

    Mutual exclusion between concurrent requests comes entirely from the
    store's atomic ``insert_if_absent``. The service never does a
    find-then-insert.
    """

    def __init__(
        self,
        store: KeyStore,
        ttl: Optional[timedelta] = None,
        checkout_window_seconds: Optional[int] = None,
        clock: Clock = utc_now,
        checkout_prefix: Optional[str] = None,
    ) -> None:
        cfg = settings.idempotency
        self._store = store
        self.ttl = ttl if ttl is not None else cfg.ttl
        self.checkout_window_seconds = (
            checkout_window_seconds
            if checkout_window_seconds is not None
            else cfg.checkout_window_seconds
        )
        self.checkout_prefix = checkout_prefix or cfg.checkout_prefix
        self._clock = clock

        if self.ttl <= timedelta(0):
            raise ValueError(f"ttl must be positive, got {self.ttl}")
        if self.checkout_window_seconds < 1:
            raise ValueError(
                f"checkout_window_seconds must be >= 1, got {self.checkout_window_seconds}"
            )

    # --- Key derivation ---

    def generate_key(self, prefix: str, *parts: object) -> str:
        """Deterministic ``<prefix>_<32 hex chars>`` key over prefix and parts.

        The digest is SHA-256 of the colon-joined ``[prefix, *parts]``,
        truncated to 32 hex characters.
        """
        if not prefix:
            raise ValueError("Idempotency key prefix must not be empty")
        material = KEY_PART_SEPARATOR.join([prefix, *(str(p) for p in parts)])
        digest = hashlib.sha256(material.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
        return f"{prefix}_{digest}"

    def bucket_timestamp(self, timestamp_ms: int) -> int:
        """Floor a millisecond timestamp to the start of its checkout window."""
        window_ms = self.checkout_window_seconds * 1000
        return timestamp_ms - (timestamp_ms % window_ms)

    def generate_checkout_key(
        self,
        tenant_id: str,
        email: str,
        package_id: str,
        event_date: str,
        timestamp_ms: int,
    ) -> str:
        """Checkout key that collapses submissions within one time window.

        Two submissions of the same checkout in the same window share a
        key; submissions in different windows are distinct attempts.
        """
        bucket = self.bucket_timestamp(int(timestamp_ms))
        return self.generate_key(
            self.checkout_prefix, tenant_id, email, package_id, event_date, bucket
        )

    # --- Storage ---

    def check_and_store(self, key: str) -> bool:
        """Atomically claim ``key``.

        Returns True if this call created the record and must run the
        operation, False if another caller already owns it.
        """
        expires_at = self._clock() + self.ttl
        try:
            result = self._store.insert_if_absent(key, expires_at)
        except DuplicateKeyError:
            logger.info("Idempotency key already claimed: %s", key)
            return False

        if result.created:
            logger.info("Idempotency key claimed: %s (expires %s)", key, expires_at.isoformat())
        else:
            logger.info("Idempotency key already claimed: %s", key)
        return result.created

    def get_stored_response(self, key: str) -> Optional[StoredResponse]:
        """Return the cached response for ``key``.

        Returns None when there is no record, when the owner has not stored
        a response yet, or when the record has expired. Expired records are
        deleted on read.
        """
        record = self._store.find(key)
        if record is None:
            return None

        if record.is_expired(self._clock()):
            logger.info("Idempotency key expired, deleting: %s", key)
            self._store.delete(key)
            return None

        return record.response

    def update_response(self, key: str, response: StoredResponse) -> None:
        """Attach the finished operation's response to ``key``.

        Raises:
            KeyNotFoundError: If ``key`` was never stored. Callers should only
                update keys they claimed through ``check_and_store``.
        """
        if not self._store.update(key, response):
            logger.error("Cannot store response for unknown idempotency key: %s", key)
            raise KeyNotFoundError(key)
        logger.debug("Stored response for idempotency key %s", key)
