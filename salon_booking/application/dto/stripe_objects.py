from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from salon_booking.domain.entities.payment import CheckoutSession, PaymentEvent


class StripeCheckoutSessionDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    url: str | None = None
    payment_status: str | None = None
    amount_total: int | None = None
    currency: str | None = None
    client_reference_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    # either an id or the expanded object
    payment_intent: str | dict[str, Any] | None = None

    def to_entity(self) -> CheckoutSession:
        intent = self.payment_intent
        intent_id: str | None = None
        receipt_url: str | None = None
        if isinstance(intent, dict):
            intent_id = intent.get("id")
            charge = intent.get("latest_charge")
            if isinstance(charge, dict):
                receipt_url = charge.get("receipt_url")
        elif intent:
            intent_id = intent

        return CheckoutSession(
            id=self.id,
            url=self.url,
            payment_status=self.payment_status,
            amount_total=self.amount_total or 0,
            currency=self.currency or "eur",
            client_reference_id=self.client_reference_id,
            metadata={str(k): str(v) for k, v in (self.metadata or {}).items() if v is not None},
            payment_intent_id=intent_id,
            receipt_url=receipt_url,
        )


class StripeEventDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str = ""
    data: dict[str, Any] = Field(default_factory=dict)

    def to_entity(self) -> PaymentEvent:
        obj = self.data.get("object") if isinstance(self.data, dict) else None
        return PaymentEvent(id=self.id, type=self.type, data_object=obj if isinstance(obj, dict) else {})
