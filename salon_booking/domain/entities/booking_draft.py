from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from salon_booking.domain.entities.booking import Customer
from salon_booking.domain.entities.stylist import AUTO_STYLIST_ID


class WizardStep(str, Enum):
    service = "service"
    stylist = "stylist"
    slot = "slot"
    details = "details"
    summary = "summary"
    done = "done"


@dataclass(frozen=True)
class BookingDraft:
    id: str
    step: WizardStep = WizardStep.service
    service_id: str | None = None
    stylist_id: str = AUTO_STYLIST_ID
    date_iso: str | None = None
    time: str | None = None
    customer: Customer | None = None
    last_booking_id: str | None = None
    updated_at: float | None = None
