from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class BookingStatus(str, Enum):
    requested = "requested"
    confirmed = "confirmed"
    canceled = "canceled"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


ALLOWED_STATUS_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.requested: frozenset({BookingStatus.confirmed, BookingStatus.canceled}),
    BookingStatus.confirmed: frozenset({BookingStatus.canceled}),
    BookingStatus.canceled: frozenset(),
}


@dataclass(frozen=True)
class Customer:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_payload(self) -> dict[str, str]:
        # camelCase keys are what the booking rows store in the customer JSON column
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Booking:
    id: str
    service_id: str
    service_name: str
    duration_min: int
    date_iso: str  # YYYY-MM-DD
    time: str  # HH:MM
    status: BookingStatus = BookingStatus.requested
    user_id: str | None = None
    created_at: str | None = None
    price_from: float = 0.0
    deposit: float = 0.0
    stylist_id: str = "auto"
    stylist_name: str = ""
    customer: Customer = field(default_factory=Customer)
    deposit_paid: bool = False
    payment_status: PaymentStatus = PaymentStatus.unpaid
    payment_provider: str | None = None
    payment_reference: str | None = None
    stripe_checkout_session_id: str | None = None
    stripe_payment_intent_id: str | None = None
    payment_receipt_url: str | None = None
    paid_at: str | None = None

    @property
    def is_canceled(self) -> bool:
        return self.status == BookingStatus.canceled

    @property
    def is_paid(self) -> bool:
        return self.deposit_paid or self.payment_status == PaymentStatus.paid

    def with_status(self, status: BookingStatus) -> "Booking":
        return replace(self, status=status)


@dataclass(frozen=True)
class NewBooking:
    """Everything the wizard knows before the backend assigns an id."""

    service_id: str
    service_name: str
    duration_min: int
    date_iso: str
    time: str
    price_from: float = 0.0
    deposit: float = 0.0
    stylist_id: str = "auto"
    stylist_name: str = ""
    customer: Customer = field(default_factory=Customer)
    status: BookingStatus = BookingStatus.requested
    deposit_paid: bool = False


@dataclass(frozen=True)
class PaymentUpdate:
    payment_status: PaymentStatus
    deposit_paid: bool
    payment_provider: str = "stripe"
    payment_reference: str | None = None
    stripe_checkout_session_id: str | None = None
    stripe_payment_intent_id: str | None = None
    payment_receipt_url: str | None = None
    paid_at: str | None = None

    def to_row(self) -> dict[str, object]:
        return {
            "payment_status": self.payment_status.value,
            "payment_provider": self.payment_provider,
            "deposit_paid": self.deposit_paid,
            "payment_reference": self.payment_reference,
            "stripe_checkout_session_id": self.stripe_checkout_session_id,
            "stripe_payment_intent_id": self.stripe_payment_intent_id,
            "payment_receipt_url": self.payment_receipt_url,
            "paid_at": self.paid_at,
        }
