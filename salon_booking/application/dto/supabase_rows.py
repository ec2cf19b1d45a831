from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salon_booking.domain.entities.booking import Booking, BookingStatus, Customer, PaymentStatus
from salon_booking.domain.entities.profile import Role, UserProfile
from salon_booking.domain.entities.waitlist import WaitlistEntry


class CustomerPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def to_entity(self) -> Customer:
        return Customer(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            notes=self.notes,
        )


class BookingRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str | None = None
    status: BookingStatus = BookingStatus.requested
    created_at: str | None = None
    service_id: str = ""
    service_name: str = ""
    duration_min: int = 0
    price_from: float | None = None
    deposit: float | None = None
    stylist_id: str | None = None
    stylist_name: str | None = None
    date_iso: str
    time: str
    customer: CustomerPayload | None = None
    deposit_paid: bool | None = None
    payment_status: PaymentStatus | None = None
    payment_provider: str | None = None
    payment_reference: str | None = None
    stripe_checkout_session_id: str | None = None
    stripe_payment_intent_id: str | None = None
    payment_receipt_url: str | None = None
    paid_at: str | None = None

    @field_validator("id", "user_id", "created_at", "paid_at", "date_iso", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("time", mode="before")
    @classmethod
    def _trim_seconds(cls, value: Any) -> Any:
        # postgres time columns come back as HH:MM:SS
        return str(value)[:5] if value is not None else value

    @field_validator("duration_min", mode="before")
    @classmethod
    def _default_duration(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("service_id", "service_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def to_entity(self) -> Booking:
        deposit_paid = bool(self.deposit_paid)
        payment_status = self.payment_status or (PaymentStatus.paid if deposit_paid else PaymentStatus.unpaid)
        return Booking(
            id=self.id,
            user_id=self.user_id,
            status=self.status,
            created_at=self.created_at,
            service_id=self.service_id,
            service_name=self.service_name,
            duration_min=self.duration_min,
            price_from=float(self.price_from or 0),
            deposit=float(self.deposit or 0),
            stylist_id=self.stylist_id or "auto",
            stylist_name=self.stylist_name or "",
            date_iso=self.date_iso,
            time=self.time,
            customer=(self.customer or CustomerPayload()).to_entity(),
            deposit_paid=deposit_paid,
            payment_status=payment_status,
            payment_provider=self.payment_provider,
            payment_reference=self.payment_reference,
            stripe_checkout_session_id=self.stripe_checkout_session_id,
            stripe_payment_intent_id=self.stripe_payment_intent_id,
            payment_receipt_url=self.payment_receipt_url,
            paid_at=self.paid_at,
        )


class WaitlistRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str | None = None
    created_at: str | None = None
    service_id: str = ""
    service_name: str = ""
    email: str = ""
    phone: str = ""
    note: str | None = None

    @field_validator("id", "user_id", "created_at", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("service_id", "service_name", "email", "phone", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    def to_entity(self) -> WaitlistEntry:
        return WaitlistEntry(
            id=self.id,
            user_id=self.user_id,
            created_at=self.created_at,
            service_id=self.service_id,
            service_name=self.service_name,
            email=self.email,
            phone=self.phone,
            note=self.note or "",
        )


class ProfileRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    address: str | None = None
    avatar_url: str | None = None
    role: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return None if value is None else str(value)

    def to_entity(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            email=self.email,
            full_name=self.full_name or "",
            phone=self.phone or "",
            address=self.address or "",
            avatar_url=self.avatar_url or "",
            role=Role.normalize(self.role),
        )


def booking_to_row(booking: Booking) -> dict[str, Any]:
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "status": booking.status.value,
        "created_at": booking.created_at,
        "service_id": booking.service_id,
        "service_name": booking.service_name,
        "duration_min": booking.duration_min,
        "price_from": booking.price_from,
        "deposit": booking.deposit,
        "stylist_id": booking.stylist_id,
        "stylist_name": booking.stylist_name,
        "date_iso": booking.date_iso,
        "time": booking.time,
        "customer": booking.customer.to_payload(),
        "deposit_paid": booking.deposit_paid,
        "payment_status": booking.payment_status.value,
    }
