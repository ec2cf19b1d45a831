"""
Tests for deposit checkout, session verification and the Stripe webhook handler.
"""

from __future__ import annotations

import json
import time

import pytest

from salon_booking.application.exceptions import (
    AuthenticationError,
    BookingNotFoundError,
    PaymentConflictError,
    PaymentNotConfiguredError,
    PermissionDeniedError,
    WebhookVerificationError,
)
from salon_booking.application.use_cases.payments import (
    CreateCheckoutSessionUseCase,
    HandlePaymentWebhookUseCase,
    VerifyCheckoutSessionUseCase,
)
from salon_booking.domain.entities.booking import BookingStatus, Customer, NewBooking, PaymentStatus
from salon_booking.domain.entities.payment import PaymentEvent
from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile
from salon_booking.infrastructure.store.memory_backend import MemoryBookingRepository, MemoryProfileRepository
from salon_booking.infrastructure.stripe.mock_gateway import MockPaymentGateway
from salon_booking.infrastructure.stripe.webhook_verify import (
    compute_signature,
    parse_signature_header,
    verify_stripe_signature,
)

ORIGIN = "https://salon.example"
ALICE = AuthUser(id="alice", email="alice@example.com")
BOB = AuthUser(id="bob", email="bob@example.com")
STAFF = AuthUser(id="staff-1")


def _setup(deposit: float = 30):
    bookings = MemoryBookingRepository()
    profiles = MemoryProfileRepository()
    profiles.add_profile(UserProfile(id=STAFF.id, role=Role.staff))
    gateway = MockPaymentGateway()
    booking = bookings.create_booking(
        NewBooking(
            service_id="dreadlocs_retwist",
            service_name="Retwist",
            duration_min=120,
            date_iso="2025-10-14",
            time="11:00",
            deposit=deposit,
            customer=Customer(first_name="Alice", last_name="Example", email="alice@example.com"),
        ),
        ALICE,
    )
    create = CreateCheckoutSessionUseCase(gateway, bookings, profiles, allowed_origin=ORIGIN)
    return create, gateway, bookings, profiles, booking


def test_checkout_marks_booking_pending():
    create, gateway, bookings, _, booking = _setup()

    result = create.execute(booking.id, ALICE, request_origin=ORIGIN)

    assert result.id == "cs_mock_1"
    assert result.booking_id == booking.id
    session = gateway.retrieve_checkout_session(result.id)
    assert session.amount_total == 3000
    assert session.metadata["booking_id"] == booking.id
    assert session.metadata["first_name"] == "Alice"
    stored = bookings.get_booking(booking.id)
    assert stored.payment_status == PaymentStatus.pending
    assert stored.stripe_checkout_session_id == result.id


def test_checkout_rejections_follow_documented_order():
    create, _, bookings, profiles, booking = _setup()

    with pytest.raises(PaymentNotConfiguredError):
        CreateCheckoutSessionUseCase(None, bookings, profiles, allowed_origin=ORIGIN).execute(None, None)
    with pytest.raises(ValueError):
        create.execute("", ALICE)
    with pytest.raises(AuthenticationError):
        create.execute(booking.id, None)
    with pytest.raises(BookingNotFoundError):
        create.execute("missing", ALICE)
    with pytest.raises(PermissionDeniedError):
        create.execute(booking.id, BOB)
    with pytest.raises(ValueError):
        create.execute(booking.id, ALICE, success_url="https://evil.example/ok", request_origin=ORIGIN)

    # staff may start a payment for any booking
    assert create.execute(booking.id, STAFF, request_origin=ORIGIN).booking_id == booking.id


def test_checkout_refuses_paid_canceled_and_zero_deposit():
    create, gateway, bookings, _, booking = _setup()
    session = gateway.mark_paid(create.execute(booking.id, ALICE, request_origin=ORIGIN).id)
    VerifyCheckoutSessionUseCase(gateway, bookings, MemoryProfileRepository()).execute(session.id, ALICE)
    with pytest.raises(PaymentConflictError):
        create.execute(booking.id, ALICE, request_origin=ORIGIN)

    create, _, bookings, _, booking = _setup()
    bookings.set_status(booking.id, BookingStatus.canceled, STAFF)
    with pytest.raises(PaymentConflictError):
        create.execute(booking.id, ALICE, request_origin=ORIGIN)

    create, _, _, _, booking = _setup(deposit=0)
    with pytest.raises(ValueError):
        create.execute(booking.id, ALICE, request_origin=ORIGIN)


def test_verify_patches_paid_booking():
    create, gateway, bookings, profiles, booking = _setup()
    session_id = create.execute(booking.id, ALICE, request_origin=ORIGIN).id
    gateway.mark_paid(session_id, payment_intent_id="pi_123")

    verified = VerifyCheckoutSessionUseCase(gateway, bookings, profiles).execute(session_id, ALICE)

    payload = verified.to_payload()
    assert payload["paid"] is True
    assert payload["booking_id"] == booking.id
    assert payload["payment_receipt_url"] == "https://receipts.mock/pi_123"
    stored = bookings.get_booking(booking.id)
    assert stored.deposit_paid is True
    assert stored.payment_status == PaymentStatus.paid
    assert stored.payment_reference == "pi_123"
    assert stored.paid_at


def test_verify_unpaid_session_resets_to_unpaid():
    create, gateway, bookings, profiles, booking = _setup()
    session_id = create.execute(booking.id, ALICE, request_origin=ORIGIN).id

    verified = VerifyCheckoutSessionUseCase(gateway, bookings, profiles).execute(session_id, ALICE)

    assert verified.to_payload()["paid"] is False
    assert bookings.get_booking(booking.id).payment_status == PaymentStatus.unpaid
    with pytest.raises(PermissionDeniedError):
        VerifyCheckoutSessionUseCase(gateway, bookings, profiles).execute(session_id, BOB)


def _event_body(event_type: str, booking_id: str | None, session_id: str = "cs_mock_1") -> bytes:
    obj = {"id": session_id, "object": "checkout.session", "payment_status": "paid", "metadata": {}}
    if booking_id:
        obj["metadata"]["booking_id"] = booking_id
    return json.dumps({"id": "evt_1", "type": event_type, "data": {"object": obj}}).encode()


def test_webhook_with_valid_signature_marks_paid():
    _, gateway, bookings, _, booking = _setup()
    handler = HandlePaymentWebhookUseCase(gateway, bookings, webhook_secret="whsec_test")

    outcome = handler.execute(_event_body("checkout.session.completed", booking.id), signature_valid=True)

    assert outcome == {"received": True, "event": "checkout.session.completed", "bookingId": booking.id, "sessionId": "cs_mock_1"}
    assert bookings.get_booking(booking.id).payment_status == PaymentStatus.paid


def test_webhook_failure_event_marks_failed():
    _, gateway, bookings, _, booking = _setup()
    handler = HandlePaymentWebhookUseCase(gateway, bookings, webhook_secret="whsec_test")

    handler.execute(_event_body("checkout.session.expired", booking.id), signature_valid=True)

    stored = bookings.get_booking(booking.id)
    assert stored.payment_status == PaymentStatus.failed
    assert stored.deposit_paid is False


def test_webhook_ignores_other_events_and_missing_booking_id():
    _, gateway, bookings, _, _ = _setup()
    handler = HandlePaymentWebhookUseCase(gateway, bookings, webhook_secret="whsec_test")

    assert handler.execute(_event_body("invoice.paid", None), signature_valid=True)["ignored"] is True
    outcome = handler.execute(_event_body("checkout.session.completed", None, session_id=""), signature_valid=True)
    assert outcome["ignored"] is True
    assert outcome["reason"] == "booking_id missing"


def test_webhook_refetches_event_when_signature_fails():
    _, gateway, bookings, _, booking = _setup()
    gateway.record_event(
        PaymentEvent(
            id="evt_1",
            type="checkout.session.completed",
            data_object={"id": "", "metadata": {"booking_id": booking.id}},
        )
    )
    handler = HandlePaymentWebhookUseCase(gateway, bookings, webhook_secret="whsec_test")

    # the forged body claims a different type; the re-fetched event wins
    outcome = handler.execute(_event_body("checkout.session.expired", booking.id), signature_valid=False)

    assert outcome["event"] == "checkout.session.completed"
    assert bookings.get_booking(booking.id).deposit_paid is True


def test_webhook_fallback_errors():
    _, gateway, bookings, _, _ = _setup()
    handler = HandlePaymentWebhookUseCase(gateway, bookings, webhook_secret=None)

    with pytest.raises(WebhookVerificationError):
        handler.execute(b'{"type": "checkout.session.completed"}', signature_valid=False)
    with pytest.raises(WebhookVerificationError):
        handler.execute(_event_body("checkout.session.completed", "b1"), signature_valid=False)  # unknown event id
    with pytest.raises(WebhookVerificationError):
        HandlePaymentWebhookUseCase(None, bookings, webhook_secret="whsec_test").execute(
            _event_body("checkout.session.completed", "b1"), signature_valid=False
        )
    with pytest.raises(PaymentNotConfiguredError):
        HandlePaymentWebhookUseCase(None, bookings, webhook_secret=None).execute(b"{}", signature_valid=False)


def test_signature_verification():
    payload = b'{"id": "evt_1"}'
    now = int(time.time())
    good = compute_signature(payload, str(now), "whsec_test")
    header = f"t={now},v1=deadbeef,v1={good}"

    assert parse_signature_header(header)["v1"] == ["deadbeef", good]
    assert verify_stripe_signature(payload, header, "whsec_test")
    assert not verify_stripe_signature(payload + b" ", header, "whsec_test")
    assert not verify_stripe_signature(payload, header, "whsec_other")
    assert not verify_stripe_signature(payload, None, "whsec_test")
    assert not verify_stripe_signature(payload, header, "whsec_test", tolerance_seconds=300, now=now + 301)
    assert verify_stripe_signature(payload, header, "whsec_test", tolerance_seconds=None, now=now + 3600)
