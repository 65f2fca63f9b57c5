"""Idempotency record models owned by the key stores."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from storefront.utils import utc_now

# A cached response is any JSON-compatible mapping.
StoredResponse = dict[str, Any]


class IdempotencyRecord(BaseModel):
    """One stored key. ``response`` stays None until the guarded operation finishes."""

    key: str
    response: Optional[StoredResponse] = None
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class InsertResult(BaseModel):
    """Outcome of an atomic insert-if-absent."""

    created: bool
