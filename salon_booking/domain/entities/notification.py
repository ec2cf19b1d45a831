from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NotificationEvent(str, Enum):
    booking_requested = "booking_requested"
    booking_confirmed = "booking_confirmed"
    booking_canceled = "booking_canceled"


@dataclass(frozen=True)
class DeliveryResult:
    sent: bool
    skipped: bool = False
    reference: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"sent": self.sent}
        if self.skipped:
            payload["skipped"] = True
        if self.reference:
            payload["id"] = self.reference
        return payload


@dataclass(frozen=True)
class NotificationResult:
    email: DeliveryResult
    sms: DeliveryResult
