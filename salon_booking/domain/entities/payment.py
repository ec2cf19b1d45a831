from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str | None = None
    payment_status: str | None = None
    amount_total: int = 0
    currency: str = "eur"
    client_reference_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    payment_intent_id: str | None = None
    receipt_url: str | None = None

    @property
    def booking_id(self) -> str | None:
        return self.metadata.get("booking_id") or self.client_reference_id or None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass(frozen=True)
class CheckoutRequest:
    booking_id: str
    amount_cents: int
    currency: str
    product_name: str
    success_url: str
    cancel_url: str
    customer_email: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentEvent:
    id: str | None
    type: str
    data_object: dict[str, Any] = field(default_factory=dict)
