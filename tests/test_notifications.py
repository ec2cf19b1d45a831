"""
Tests for booking notifications: message rendering, access rules and the Resend/Twilio senders.
"""

from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest

from salon_booking.application.exceptions import (
    AuthenticationError,
    BookingNotFoundError,
    NotificationDeliveryError,
    PermissionDeniedError,
)
from salon_booking.application.use_cases.notifications import (
    BookingNotifier,
    SendBookingNotificationUseCase,
    parse_event,
)
from salon_booking.application.utils.message_templates import build_notification_message
from salon_booking.domain.entities.booking import Booking, Customer, NewBooking
from salon_booking.domain.entities.notification import NotificationEvent
from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile
from salon_booking.infrastructure.notifications.mock_sender import MockEmailSender, MockSmsSender
from salon_booking.infrastructure.notifications.resend_client import ResendEmailSender
from salon_booking.infrastructure.notifications.twilio_client import TwilioSmsSender
from salon_booking.infrastructure.store.memory_backend import MemoryBookingRepository, MemoryProfileRepository

ALICE = AuthUser(id="alice", email="alice@example.com")
BOB = AuthUser(id="bob")
STAFF = AuthUser(id="staff-1")


def _setup():
    bookings = MemoryBookingRepository()
    profiles = MemoryProfileRepository()
    profiles.add_profile(UserProfile(id=STAFF.id, role=Role.staff))
    email, sms = MockEmailSender(), MockSmsSender()
    notifier = BookingNotifier(email=email, sms=sms, business_name="Parrylicious Studio")
    booking = bookings.create_booking(
        NewBooking(
            service_id="comb_twist",
            service_name="Comb twist",
            duration_min=90,
            date_iso="2025-10-14",
            time="12:00",
            customer=Customer(first_name="Alice", email="alice@example.com", phone="+49151000000"),
        ),
        ALICE,
    )
    return SendBookingNotificationUseCase(bookings, profiles, notifier), booking, email, sms


def test_message_mentions_date_time_and_business():
    booking = Booking(id="b1", service_id="s", service_name="Cornrows", duration_min=60, date_iso="2025-10-14", time="11:00")

    text = build_notification_message(NotificationEvent.booking_confirmed, booking, "Parrylicious Studio")

    assert text.startswith("Hi there,")
    assert "Tue, 14.10.2025 at 11:00" in text
    assert "Cornrows is confirmed" in text
    assert text.endswith("Parrylicious Studio")


def test_parse_event_rejects_unknown_types():
    assert parse_event("booking_canceled") == NotificationEvent.booking_canceled
    with pytest.raises(ValueError, match="Invalid eventType"):
        parse_event("booking_exploded")
    with pytest.raises(ValueError):
        parse_event(None)


def test_owner_can_send_request_notification():
    uc, booking, email, sms = _setup()

    result = uc.execute("booking_requested", booking.id, ALICE)

    assert result.email.sent and result.sms.sent
    assert email.sent[0][0] == "alice@example.com"
    assert "request received" in email.sent[0][1]
    assert sms.sent[0][0] == "+49151000000"


def test_notification_access_rules():
    uc, booking, *_ = _setup()

    with pytest.raises(ValueError):
        uc.execute("booking_requested", "", ALICE)
    with pytest.raises(AuthenticationError):
        uc.execute("booking_requested", booking.id, None)
    with pytest.raises(BookingNotFoundError):
        uc.execute("booking_requested", "missing", ALICE)
    with pytest.raises(PermissionDeniedError):
        uc.execute("booking_requested", booking.id, BOB)
    with pytest.raises(PermissionDeniedError, match="Only staff"):
        uc.execute("booking_confirmed", booking.id, ALICE)

    assert uc.execute("booking_confirmed", booking.id, STAFF).email.sent


def test_missing_contact_is_skipped():
    notifier = BookingNotifier(email=MockEmailSender(), sms=MockSmsSender(), business_name="Studio")
    booking = Booking(id="b1", service_id="s", service_name="S", duration_min=60, date_iso="2025-10-14", time="11:00")

    result = notifier.notify(NotificationEvent.booking_requested, booking)

    assert result.email.to_payload() == {"sent": False, "skipped": True}
    assert result.sms.skipped


def test_resend_posts_plain_text_email():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    sender = ResendEmailSender("re_key", "Studio <hi@studio.example>", transport=httpx.MockTransport(handler))

    result = sender.send_email("alice@example.com", "Subject", "Body")

    assert result.reference == "email_1"
    assert captured["auth"] == "Bearer re_key"
    assert captured["body"] == {
        "from": "Studio <hi@studio.example>",
        "to": ["alice@example.com"],
        "subject": "Subject",
        "text": "Body",
    }


def test_resend_error_and_missing_config():
    failing = ResendEmailSender(
        "re_key",
        "hi@studio.example",
        transport=httpx.MockTransport(lambda request: httpx.Response(422, json={"message": "Invalid `to` field"})),
    )
    with pytest.raises(NotificationDeliveryError, match="Invalid `to` field"):
        failing.send_email("nope", "Subject", "Body")

    assert ResendEmailSender(None, "hi@studio.example").send_email("a@b.c", "S", "T").skipped


def test_twilio_posts_form_with_basic_auth():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM123"})

    sender = TwilioSmsSender("AC1", "secret", "+4915100", transport=httpx.MockTransport(handler))

    result = sender.send_sms("+49151000000", "Hello")

    assert result.reference == "SM123"
    assert captured["url"] == "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json"
    assert captured["auth"].startswith("Basic ")
    assert captured["form"] == {"To": ["+49151000000"], "From": ["+4915100"], "Body": ["Hello"]}


def test_twilio_unreachable_raises_delivery_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    sender = TwilioSmsSender("AC1", "secret", "+4915100", transport=httpx.MockTransport(handler))

    with pytest.raises(NotificationDeliveryError, match="unreachable"):
        sender.send_sms("+49151000000", "Hello")
    assert TwilioSmsSender("AC1", "secret", None).send_sms("+49151000000", "Hello").skipped
