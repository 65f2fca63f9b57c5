from storefront.adapters.memory import (
    FakePaymentProvider,
    InMemoryBlackoutRepository,
    InMemoryBookingRepository,
    InMemoryKeyStore,
    StaticCalendarProvider,
)
from storefront.adapters.sql_key_store import SqlKeyStore

__all__ = [
    "InMemoryBlackoutRepository", "InMemoryBookingRepository", "StaticCalendarProvider",
    "InMemoryKeyStore", "FakePaymentProvider", "SqlKeyStore",
]
