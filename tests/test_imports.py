"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestPackageImports:
    def test_import_services_package(self):
        from storefront.services import (
            AvailabilityResolver, CheckoutService, IdempotencyKeyService,
        )
        assert AvailabilityResolver is not None
        assert CheckoutService is not None
        assert IdempotencyKeyService is not None

    def test_import_adapters_package(self):
        from storefront.adapters import InMemoryKeyStore, SqlKeyStore
        assert len(InMemoryKeyStore()) == 0
        assert SqlKeyStore is not None

    def test_import_errors(self):
        from storefront.errors import (
            AvailabilityCheckError, DuplicateKeyError, IdempotencyError, KeyNotFoundError,
            StorefrontError,
        )
        assert issubclass(AvailabilityCheckError, StorefrontError)
        assert issubclass(DuplicateKeyError, IdempotencyError)
        assert issubclass(KeyNotFoundError, IdempotencyError)

    def test_import_ports(self):
        from storefront.ports import (
            BlackoutRepository, BookingRepository, CalendarProvider, KeyStore, PaymentProvider,
        )
        assert KeyStore is not None

    def test_import_config(self):
        from storefront.config import settings
        assert settings.idempotency.checkout_prefix
        assert settings.idempotency.digest_length == 32
