from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from salon_booking.domain.entities.availability import DaySchedule
from salon_booking.domain.entities.booking import Booking, Customer
from salon_booking.domain.entities.booking_draft import BookingDraft
from salon_booking.domain.entities.profile import UserProfile
from salon_booking.domain.entities.service_catalog import Service
from salon_booking.domain.entities.stylist import Stylist
from salon_booking.domain.entities.waitlist import WaitlistEntry


class ServiceSchema(BaseModel):
    id: str
    name: str
    category: str
    price_from: int
    duration_min: int
    deposit: int
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, service: Service) -> "ServiceSchema":
        return cls(
            id=service.id,
            name=service.name,
            category=service.category,
            price_from=service.price_from,
            duration_min=service.duration_min,
            deposit=service.deposit,
            description=service.description,
            tags=list(service.tags),
        )


class StylistSchema(BaseModel):
    id: str
    name: str
    focus: str
    role: str


class SlotSchema(BaseModel):
    time: str
    available: bool


class DayScheduleSchema(BaseModel):
    date_iso: str
    duration_min: int
    open_start: str
    open_end: str
    source: str
    slots: list[SlotSchema]

    @classmethod
    def from_entity(cls, schedule: DaySchedule) -> "DayScheduleSchema":
        return cls(
            date_iso=schedule.date_iso,
            duration_min=schedule.duration_min,
            open_start=schedule.open_start,
            open_end=schedule.open_end,
            source=schedule.source,
            slots=[SlotSchema(time=s.time, available=s.available) for s in schedule.slots],
        )


class SlotCheckRequestSchema(BaseModel):
    date_iso: str
    time: str
    duration_min: int = Field(gt=0)
    stylist_id: str = "auto"
    exclude_booking_id: str | None = None


class SlotCheckResponseSchema(BaseModel):
    available: bool
    source: str


class CustomerSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""

    def to_entity(self) -> Customer:
        return Customer(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            notes=self.notes,
        )

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerSchema":
        return cls(
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            phone=customer.phone,
            address=customer.address,
            notes=customer.notes,
        )


class DraftSchema(BaseModel):
    id: str
    step: str
    service_id: str | None = None
    stylist_id: str
    date_iso: str | None = None
    time: str | None = None
    customer: CustomerSchema | None = None
    last_booking_id: str | None = None

    @classmethod
    def from_entity(cls, draft: BookingDraft) -> "DraftSchema":
        return cls(
            id=draft.id,
            step=draft.step.value,
            service_id=draft.service_id,
            stylist_id=draft.stylist_id,
            date_iso=draft.date_iso,
            time=draft.time,
            customer=CustomerSchema.from_entity(draft.customer) if draft.customer else None,
            last_booking_id=draft.last_booking_id,
        )


class StartDraftSchema(BaseModel):
    service_id: str | None = None


class SelectServiceSchema(BaseModel):
    service_id: str


class SelectStylistSchema(BaseModel):
    stylist_id: str


class SelectDateSchema(BaseModel):
    date_iso: str


class SelectTimeSchema(BaseModel):
    time: str


class SummarySchema(BaseModel):
    service_name: str
    duration_label: str
    date_label: str
    time: str
    stylist_name: str
    deposit_label: str
    remainder_label: str
    customer: CustomerSchema | None = None


class WaitlistRequestSchema(BaseModel):
    email: str = ""
    phone: str = ""
    note: str | None = None


class WaitlistEntrySchema(BaseModel):
    id: str
    service_id: str
    service_name: str
    email: str
    phone: str
    note: str
    user_id: str | None = None
    created_at: str | None = None

    @classmethod
    def from_entity(cls, entry: WaitlistEntry) -> "WaitlistEntrySchema":
        return cls(
            id=entry.id,
            service_id=entry.service_id,
            service_name=entry.service_name,
            email=entry.email,
            phone=entry.phone,
            note=entry.note,
            user_id=entry.user_id,
            created_at=entry.created_at,
        )


class BookingSchema(BaseModel):
    id: str
    status: str
    user_id: str | None = None
    created_at: str | None = None
    service_id: str
    service_name: str
    duration_min: int
    price_from: float
    deposit: float
    stylist_id: str
    stylist_name: str
    date_iso: str
    time: str
    customer: CustomerSchema
    deposit_paid: bool
    payment_status: str
    payment_receipt_url: str | None = None
    paid_at: str | None = None
    deposit_action: str | None = None

    @classmethod
    def from_entity(cls, booking: Booking, deposit_action: str | None = None) -> "BookingSchema":
        return cls(
            id=booking.id,
            status=booking.status.value,
            user_id=booking.user_id,
            created_at=booking.created_at,
            service_id=booking.service_id,
            service_name=booking.service_name,
            duration_min=booking.duration_min,
            price_from=booking.price_from,
            deposit=booking.deposit,
            stylist_id=booking.stylist_id,
            stylist_name=booking.stylist_name,
            date_iso=booking.date_iso,
            time=booking.time,
            customer=CustomerSchema.from_entity(booking.customer),
            deposit_paid=booking.deposit_paid,
            payment_status=booking.payment_status.value,
            payment_receipt_url=booking.payment_receipt_url,
            paid_at=booking.paid_at,
            deposit_action=deposit_action,
        )


class StatusUpdateSchema(BaseModel):
    status: str


class KpiSchema(BaseModel):
    bookings: int
    waitlist: int
    open_payments: int


class IdentitySchema(BaseModel):
    user_id: str
    email: str | None = None
    role: str


class ProfileSchema(BaseModel):
    id: str
    email: str | None = None
    full_name: str = ""
    phone: str = ""
    address: str = ""
    avatar_url: str = ""
    role: str

    @classmethod
    def from_entity(cls, profile: UserProfile) -> "ProfileSchema":
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            phone=profile.phone,
            address=profile.address,
            avatar_url=profile.avatar_url,
            role=profile.role.value,
        )


class ProfileUpdateSchema(BaseModel):
    full_name: str = ""
    phone: str = ""
    address: str = ""
    avatar_url: str = ""


class RoleUpdateSchema(BaseModel):
    email: str
    role: str


class CredentialsSchema(BaseModel):
    email: str
    password: str
    next: str | None = None
    redirect_to: str | None = None


class PasswordResetSchema(BaseModel):
    email: str
    redirect_to: str | None = None


class SessionSchema(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user_id: str
    email: str | None = None
    next: str | None = None


class SignUpResponseSchema(BaseModel):
    user_id: str | None = None
    confirmation_required: bool


class ProfileMenuSchema(BaseModel):
    signed_in: bool
    email: str | None = None
    role_label: str


class CheckoutRequestSchema(BaseModel):
    bookingId: str | None = None
    successUrl: str | None = None
    cancelUrl: str | None = None


class NotificationBookingRefSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None


class NotificationRequestSchema(BaseModel):
    eventType: str | None = None
    booking: NotificationBookingRefSchema = Field(default_factory=NotificationBookingRefSchema)
