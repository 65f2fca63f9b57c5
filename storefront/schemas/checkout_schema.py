"""Checkout request and result models."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.utils import normalize_email, parse_calendar_date


class CheckoutRequest(BaseModel):
    """Validated checkout submission from the storefront."""
    tenant_id: str
    email: str
    package_id: str
    event_date: date
    couple_name: str
    amount_cents: int = Field(ge=0)
    add_on_ids: list[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        value = normalize_email(value)
        if "@" not in value:
            raise ValueError(f"Invalid email address: {value!r}")
        return value

    @field_validator("event_date", mode="before")
    @classmethod
    def _parse_event_date(cls, value: Any) -> date:
        return parse_calendar_date(value)


class CheckoutSession(BaseModel):
    """Session handed back by the payment provider."""
    session_id: str
    url: str


class CheckoutResult(BaseModel):
    """What the checkout controller returns to the client."""
    checkout_url: str
    session_id: Optional[str] = None
    idempotency_key: str
    replayed: bool = False
