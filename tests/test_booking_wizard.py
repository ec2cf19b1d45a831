"""
Tests for the booking wizard flow, from service selection to confirmation.
"""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

import pytest

from salon_booking.application.exceptions import (
    DraftNotFoundError,
    NotificationDeliveryError,
    SlotUnavailableError,
)
from salon_booking.application.ports.notifier import EmailSenderPort
from salon_booking.application.use_cases.availability import AvailabilityUseCase
from salon_booking.application.use_cases.booking_wizard import BookingWizardUseCase
from salon_booking.application.use_cases.notifications import BookingNotifier
from salon_booking.application.utils.slot_rules import OpeningHours
from salon_booking.domain.entities.booking import BookingStatus, Customer, NewBooking
from salon_booking.domain.entities.booking_draft import WizardStep
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from salon_booking.infrastructure.notifications.mock_sender import MockEmailSender, MockSmsSender
from salon_booking.infrastructure.store.memory_backend import MemoryBookingRepository, MemoryWaitlistRepository
from salon_booking.infrastructure.store.memory_store import MemoryDraftStore

DAY = "2025-10-14"
TODAY = date(2025, 10, 13)
USER = AuthUser(id="user-1", email="ada@example.com")
CUSTOMER = Customer(first_name="Ada", last_name="Lovelace", email="ada@example.com", phone="+49 151 000000")


class FailingEmailSender(EmailSenderPort):
    def send_email(self, to, subject, text):
        raise NotificationDeliveryError("Resend is unreachable")


def _wizard(email: EmailSenderPort | None = None, bookings: MemoryBookingRepository | None = None):
    bookings = bookings or MemoryBookingRepository()
    email = email or MockEmailSender()
    sms = MockSmsSender()
    wizard = BookingWizardUseCase(
        drafts=MemoryDraftStore(),
        catalog=ServiceCatalogStore(),
        bookings=bookings,
        waitlist=MemoryWaitlistRepository(),
        availability=AvailabilityUseCase(bookings, OpeningHours(weekdays=frozenset({1, 2, 3, 4, 5}))),
        notifier=BookingNotifier(email=email, sms=sms, business_name="Parrylicious Studio"),
        timezone=ZoneInfo("Europe/Berlin"),
        business_name="Parrylicious Studio",
        business_address="Bahlenstrasse 42, 40589 Duesseldorf",
    )
    return wizard, bookings, email, sms


def _ready_draft(wizard: BookingWizardUseCase, stylist: str = "stylist_b", time: str = "12:00"):
    draft = wizard.start("comb_twist")
    wizard.select_stylist(draft.id, stylist)
    wizard.select_date(draft.id, DAY, today=TODAY)
    wizard.select_time(draft.id, time, today=TODAY)
    return wizard.submit_details(draft.id, CUSTOMER)


def test_start_keeps_known_service_and_ignores_unknown():
    wizard, *_ = _wizard()
    assert wizard.start("comb_twist").service_id == "comb_twist"
    assert wizard.start("comb_twist").step == WizardStep.stylist
    unknown = wizard.start("not_a_service")
    assert unknown.service_id is None
    assert unknown.step == WizardStep.service


def test_changing_service_or_stylist_clears_time():
    wizard, *_ = _wizard()
    draft = _ready_draft(wizard)
    assert draft.time == "12:00"

    draft = wizard.select_service(draft.id, "cornrows")
    assert draft.time is None
    assert draft.date_iso == DAY

    draft = wizard.select_time(draft.id, "13:00", today=TODAY)
    draft = wizard.select_stylist(draft.id, "auto")
    assert draft.time is None


def test_unknown_choices_are_rejected():
    wizard, *_ = _wizard()
    draft = wizard.start()
    with pytest.raises(ValueError):
        wizard.select_service(draft.id, "nope")
    with pytest.raises(ValueError):
        wizard.select_stylist(draft.id, "nobody")
    with pytest.raises(ValueError):
        wizard.select_date(draft.id, "2025-10-13", today=TODAY)  # Monday, closed
    with pytest.raises(DraftNotFoundError):
        wizard.get("missing")


def test_select_time_requires_an_open_slot():
    wizard, bookings, *_ = _wizard()
    bookings.create_booking(
        NewBooking(
            service_id="comb_twist",
            service_name="Comb twist",
            duration_min=90,
            date_iso=DAY,
            time="12:00",
            stylist_id="stylist_b",
        ),
        AuthUser(id="someone-else"),
    )
    draft = wizard.start("comb_twist")
    wizard.select_stylist(draft.id, "stylist_b")
    wizard.select_date(draft.id, DAY, today=TODAY)

    with pytest.raises(SlotUnavailableError):
        wizard.select_time(draft.id, "12:30", today=TODAY)
    with pytest.raises(SlotUnavailableError):
        wizard.select_time(draft.id, "07:00", today=TODAY)  # before opening
    assert wizard.select_time(draft.id, "13:30", today=TODAY).time == "13:30"


def test_reset_date_clears_date_and_time():
    wizard, *_ = _wizard()
    draft = _ready_draft(wizard)
    draft = wizard.reset_date(draft.id)
    assert draft.date_iso is None
    assert draft.time is None
    assert draft.step == WizardStep.slot


def test_submit_details_requires_contact_fields():
    wizard, *_ = _wizard()
    draft = wizard.start("comb_twist")
    with pytest.raises(ValueError) as exc:
        wizard.submit_details(draft.id, Customer(first_name="Ada", email="ada@example.com"))
    assert "last name" in str(exc.value)
    assert "phone" in str(exc.value)


def test_summary_lists_deposit_and_remainder():
    wizard, *_ = _wizard()
    draft = _ready_draft(wizard)
    summary = wizard.summary(draft.id)
    assert summary.service_name
    assert summary.duration_label == "1 h 30 min"
    assert summary.date_label == "Tue, 14.10.2025"
    assert summary.stylist_name == "Stylist B"
    assert summary.deposit_label == "25,00 €"
    assert "in salon" in summary.remainder_label


def test_confirm_creates_requested_booking_and_notifies():
    wizard, bookings, email, sms = _wizard()
    draft = _ready_draft(wizard)

    booking = wizard.confirm(draft.id, USER)

    assert booking.status == BookingStatus.requested
    assert booking.deposit_paid is False
    assert booking.deposit == 25
    assert booking.user_id == USER.id
    assert bookings.get_booking(booking.id) is not None
    done = wizard.get(draft.id)
    assert done.step == WizardStep.done
    assert done.last_booking_id == booking.id
    assert len(email.sent) == 1
    assert len(sms.sent) == 1


def test_confirm_conflict_drops_time_and_raises():
    """A slot taken between picking and confirming surfaces as SlotUnavailableError."""
    wizard, bookings, *_ = _wizard()
    draft = _ready_draft(wizard)
    bookings.create_booking(
        NewBooking(
            service_id="comb_twist",
            service_name="Comb twist",
            duration_min=90,
            date_iso=DAY,
            time="12:00",
            stylist_id="stylist_b",
        ),
        AuthUser(id="faster-customer"),
    )

    with pytest.raises(SlotUnavailableError):
        wizard.confirm(draft.id, USER)

    after = wizard.get(draft.id)
    assert after.time is None
    assert after.step == WizardStep.slot


def test_notification_failure_does_not_block_booking():
    wizard, bookings, *_ = _wizard(email=FailingEmailSender())
    draft = _ready_draft(wizard)

    booking = wizard.confirm(draft.id, USER)

    assert bookings.get_booking(booking.id) is not None


def test_join_waitlist_uses_default_note():
    wizard, *_ = _wizard()
    draft = wizard.start("passion_twist")
    entry = wizard.join_waitlist(draft.id, "ada@example.com", "", user=USER)
    assert entry.note == "Waitlist"
    assert entry.service_id == "passion_twist"
    assert entry.user_id == USER.id

    with pytest.raises(ValueError):
        wizard.join_waitlist(wizard.start().id, "ada@example.com", "")


def test_calendar_file_uses_business_timezone():
    wizard, *_ = _wizard()
    booking = wizard.confirm(_ready_draft(wizard).id, USER)

    ics = wizard.calendar_file(booking)

    assert ics.startswith("BEGIN:VCALENDAR\r\n")
    assert "DTSTART:20251014T100000Z" in ics
    assert "DTEND:20251014T113000Z" in ics
    assert ics.endswith("END:VCALENDAR")
