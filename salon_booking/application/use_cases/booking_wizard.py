from __future__ import annotations

import logging
import time as time_module
from dataclasses import dataclass, replace
from datetime import date
from zoneinfo import ZoneInfo

from salon_booking.application.exceptions import DraftNotFoundError, SlotUnavailableError
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.draft_store import DraftStorePort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.ports.waitlist_repository import WaitlistRepositoryPort
from salon_booking.application.use_cases.availability import AvailabilityUseCase
from salon_booking.application.use_cases.notifications import BookingNotifier
from salon_booking.application.utils.exports import booking_to_ics
from salon_booking.application.utils.formatting import format_currency, format_date_label, format_minutes
from salon_booking.application.utils.slot_rules import is_bookable_day, parse_date_iso
from salon_booking.domain.entities.availability import DaySchedule
from salon_booking.domain.entities.booking import Booking, Customer, NewBooking
from salon_booking.domain.entities.booking_draft import BookingDraft, WizardStep
from salon_booking.domain.entities.notification import NotificationEvent
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.domain.entities.service_catalog import Service
from salon_booking.domain.entities.stylist import AUTO_STYLIST_ID
from salon_booking.domain.entities.waitlist import NewWaitlistEntry, WaitlistEntry

DEFAULT_WAITLIST_NOTE = "Waitlist"


@dataclass(frozen=True)
class BookingSummary:
    service_name: str
    duration_label: str
    date_label: str
    time: str
    stylist_name: str
    deposit_label: str
    remainder_label: str
    customer: Customer | None


class BookingWizardUseCase:
    """
    Drives the multi-step booking page: service, stylist, slot, details,
    summary, confirmation. Every operation loads the draft, validates the
    input against the catalog and availability, and saves the new state.
    """

    def __init__(
        self,
        drafts: DraftStorePort,
        catalog: ServiceCatalogPort,
        bookings: BookingRepositoryPort,
        waitlist: WaitlistRepositoryPort,
        availability: AvailabilityUseCase,
        notifier: BookingNotifier,
        timezone: ZoneInfo,
        business_name: str,
        business_address: str,
    ) -> None:
        self._drafts = drafts
        self._catalog = catalog
        self._bookings = bookings
        self._waitlist = waitlist
        self._availability = availability
        self._notifier = notifier
        self._timezone = timezone
        self._business_name = business_name
        self._business_address = business_address
        self._logger = logging.getLogger(__name__)

    def start(self, service_id: str | None = None) -> BookingDraft:
        draft = BookingDraft(id=self._drafts.new_id())
        service = self._catalog.get_service(service_id) if service_id else None
        if service is not None:
            draft = replace(draft, service_id=service.id, step=WizardStep.stylist)
        return self._save(draft)

    def get(self, draft_id: str) -> BookingDraft:
        draft = self._drafts.get_draft(draft_id)
        if draft is None:
            raise DraftNotFoundError(f"Unknown booking draft {draft_id}")
        return draft

    def select_service(self, draft_id: str, service_id: str) -> BookingDraft:
        draft = self.get(draft_id)
        service = self._catalog.get_service(service_id)
        if service is None:
            raise ValueError(f"Unknown service '{service_id}'")
        return self._save(replace(draft, service_id=service.id, time=None, step=WizardStep.stylist))

    def select_stylist(self, draft_id: str, stylist_id: str) -> BookingDraft:
        draft = self.get(draft_id)
        stylist = self._catalog.get_stylist(stylist_id)
        if stylist is None:
            raise ValueError(f"Unknown stylist '{stylist_id}'")
        return self._save(replace(draft, stylist_id=stylist.id, time=None, step=WizardStep.slot))

    def select_date(self, draft_id: str, date_iso: str, today: date | None = None) -> BookingDraft:
        draft = self.get(draft_id)
        day = parse_date_iso(date_iso)
        if not is_bookable_day(day, today or date.today(), self._availability.hours):
            raise ValueError(f"{date_iso} is not bookable")
        return self._save(replace(draft, date_iso=day.isoformat(), time=None, step=WizardStep.slot))

    def list_slots(self, draft_id: str, today: date | None = None) -> DaySchedule:
        draft = self.get(draft_id)
        service = self._require_service(draft)
        if not draft.date_iso:
            raise ValueError("Pick a date first")
        return self._availability.list_day(draft.date_iso, service.duration_min, draft.stylist_id, today=today)

    def select_time(self, draft_id: str, time: str, today: date | None = None) -> BookingDraft:
        draft = self.get(draft_id)
        schedule = self.list_slots(draft_id, today=today)
        slot = next((s for s in schedule.slots if s.time == time), None)
        if slot is None or not slot.available:
            raise SlotUnavailableError(f"{time} is not available on {draft.date_iso}")
        return self._save(replace(draft, time=time, step=WizardStep.details))

    def reset_date(self, draft_id: str) -> BookingDraft:
        draft = self.get(draft_id)
        return self._save(replace(draft, date_iso=None, time=None, step=WizardStep.slot))

    def submit_details(self, draft_id: str, customer: Customer) -> BookingDraft:
        draft = self.get(draft_id)
        cleaned = Customer(
            first_name=customer.first_name.strip(),
            last_name=customer.last_name.strip(),
            email=customer.email.strip(),
            phone=customer.phone.strip(),
            address=customer.address.strip(),
            notes=customer.notes.strip(),
        )
        missing = [
            label
            for label, value in (
                ("first name", cleaned.first_name),
                ("last name", cleaned.last_name),
                ("email", cleaned.email),
                ("phone", cleaned.phone),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing {', '.join(missing)}")
        if "@" not in cleaned.email:
            raise ValueError("Please enter a valid email address")
        return self._save(replace(draft, customer=cleaned, step=WizardStep.summary))

    def summary(self, draft_id: str) -> BookingSummary:
        draft = self.get(draft_id)
        service = self._require_service(draft)
        stylist = self._catalog.get_stylist(draft.stylist_id)
        return BookingSummary(
            service_name=service.name,
            duration_label=format_minutes(service.duration_min),
            date_label=format_date_label(draft.date_iso),
            time=draft.time or "",
            stylist_name=stylist.name if stylist else draft.stylist_id,
            deposit_label=format_currency(service.deposit),
            remainder_label="Remainder payable in salon",
            customer=draft.customer,
        )

    def confirm(self, draft_id: str, user: AuthUser) -> Booking:
        draft = self.get(draft_id)
        service = self._require_service(draft)
        if not draft.date_iso or not draft.time:
            raise ValueError("Pick a date and time first")
        if draft.customer is None:
            raise ValueError("Customer details are missing")

        stylist = self._catalog.get_stylist(draft.stylist_id)
        new_booking = NewBooking(
            service_id=service.id,
            service_name=service.name,
            duration_min=service.duration_min,
            price_from=service.price_from,
            deposit=service.deposit,
            stylist_id=draft.stylist_id or AUTO_STYLIST_ID,
            stylist_name=stylist.name if stylist else "",
            date_iso=draft.date_iso,
            time=draft.time,
            customer=draft.customer,
        )

        try:
            booking = self._bookings.create_booking(new_booking, user)
        except SlotUnavailableError:
            self._logger.info(
                "Slot taken before confirmation",
                extra={"user_id": user.id, "reason": f"{draft.date_iso} {draft.time}"},
            )
            self._save(replace(draft, time=None, step=WizardStep.slot))
            raise

        self._save(replace(draft, step=WizardStep.done, last_booking_id=booking.id))
        self._logger.info("Booking requested", extra={"booking_id": booking.id, "user_id": user.id})
        self._notifier.notify_quietly(NotificationEvent.booking_requested, booking)
        return booking

    def join_waitlist(
        self,
        draft_id: str,
        email: str,
        phone: str,
        note: str | None = None,
        user: AuthUser | None = None,
    ) -> WaitlistEntry:
        draft = self.get(draft_id)
        service = self._require_service(draft)
        if not (email or "").strip() and not (phone or "").strip():
            raise ValueError("Email or phone is required")
        entry = NewWaitlistEntry(
            service_id=service.id,
            service_name=service.name,
            email=(email or "").strip(),
            phone=(phone or "").strip(),
            note=(note or "").strip() or DEFAULT_WAITLIST_NOTE,
        )
        created = self._waitlist.create_entry(entry, user.id if user else None)
        self._logger.info("Waitlist entry created", extra={"user_id": user.id if user else None})
        return created

    def calendar_file(self, booking: Booking) -> str:
        return booking_to_ics(booking, self._timezone, self._business_name, self._business_address)

    def _require_service(self, draft: BookingDraft) -> Service:
        service = self._catalog.get_service(draft.service_id) if draft.service_id else None
        if service is None:
            raise ValueError("Pick a service first")
        return service

    def _save(self, draft: BookingDraft) -> BookingDraft:
        saved = replace(draft, updated_at=time_module.time())
        self._drafts.save_draft(saved)
        return saved
