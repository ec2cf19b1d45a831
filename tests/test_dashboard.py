"""
Tests for the admin/customer dashboard: scoping, status changes, exports and profiles.
"""

from __future__ import annotations

from dataclasses import replace

import pytest

from salon_booking.application.exceptions import (
    BookingNotFoundError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
)
from salon_booking.application.use_cases.dashboard import (
    DashboardUseCase,
    deposit_action_label,
    filter_bookings,
)
from salon_booking.application.use_cases.notifications import BookingNotifier
from salon_booking.domain.entities.booking import Booking, BookingStatus, Customer, NewBooking, PaymentStatus, PaymentUpdate
from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile
from salon_booking.domain.entities.waitlist import NewWaitlistEntry
from salon_booking.infrastructure.notifications.mock_sender import MockEmailSender, MockSmsSender
from salon_booking.infrastructure.store.memory_backend import (
    MemoryBookingRepository,
    MemoryProfileRepository,
    MemoryWaitlistRepository,
)

ADMIN = AuthUser(id="admin-1", email="owner@example.com")
STAFF = AuthUser(id="staff-1", email="staff@example.com")
ALICE = AuthUser(id="alice", email="alice@example.com")
BOB = AuthUser(id="bob", email="bob@example.com")


def _setup():
    bookings = MemoryBookingRepository()
    waitlist = MemoryWaitlistRepository()
    profiles = MemoryProfileRepository()
    profiles.add_profile(UserProfile(id=ADMIN.id, email=ADMIN.email, role=Role.admin))
    profiles.add_profile(UserProfile(id=STAFF.id, email=STAFF.email, role=Role.staff))
    profiles.add_profile(UserProfile(id=ALICE.id, email=ALICE.email, full_name="Alice Example"))
    profiles.add_profile(UserProfile(id=BOB.id, email=BOB.email))
    email, sms = MockEmailSender(), MockSmsSender()
    uc = DashboardUseCase(
        bookings=bookings,
        waitlist=waitlist,
        profiles=profiles,
        notifier=BookingNotifier(email=email, sms=sms, business_name="Parrylicious Studio"),
    )
    return uc, bookings, waitlist, email


def _book(bookings: MemoryBookingRepository, user: AuthUser, time: str, first_name: str, service: str = "Comb twist"):
    return bookings.create_booking(
        NewBooking(
            service_id="comb_twist",
            service_name=service,
            duration_min=90,
            date_iso="2025-10-14",
            time=time,
            deposit=25,
            customer=Customer(first_name=first_name, last_name="Example", email=user.email or "", phone="0151 123"),
        ),
        user,
    )


def test_customers_only_see_their_own_bookings():
    uc, bookings, *_ = _setup()
    _book(bookings, ALICE, "11:00", "Alice")
    _book(bookings, BOB, "13:00", "Bob")

    assert [b.customer.first_name for b in uc.list_bookings(ALICE)] == ["Alice"]
    assert len(uc.list_bookings(STAFF)) == 2


def test_filter_by_status_and_search():
    uc, bookings, *_ = _setup()
    first = _book(bookings, ALICE, "11:00", "Alice", service="Cornrows")
    _book(bookings, BOB, "13:00", "Bob")
    uc.update_status(STAFF, first.id, "confirmed")

    assert [b.id for b in uc.list_bookings(STAFF, status="confirmed")] == [first.id]
    assert [b.id for b in uc.list_bookings(STAFF, search="CORNROWS")] == [first.id]
    assert len(uc.list_bookings(STAFF, search="0151")) == 2
    assert uc.list_bookings(STAFF, status="canceled") == []


def test_filter_bookings_sorts_newest_first():
    older = Booking(id="a", service_id="s", service_name="S", duration_min=60, date_iso="2025-10-14", time="11:00", created_at="2025-10-01T10:00:00+00:00")
    newer = Booking(id="b", service_id="s", service_name="S", duration_min=60, date_iso="2025-10-14", time="12:00", created_at="2025-10-02T10:00:00+00:00")
    assert [b.id for b in filter_bookings([older, newer])] == ["b", "a"]


def test_staff_confirm_sends_notification():
    uc, bookings, _, email = _setup()
    booking = _book(bookings, ALICE, "11:00", "Alice")

    updated = uc.update_status(STAFF, booking.id, "confirmed")

    assert updated.status == BookingStatus.confirmed
    assert "confirmed" in email.sent[-1][1].lower()


def test_customer_may_only_cancel_own_booking():
    uc, bookings, *_ = _setup()
    alice_booking = _book(bookings, ALICE, "11:00", "Alice")
    bob_booking = _book(bookings, BOB, "13:00", "Bob")

    with pytest.raises(PermissionDeniedError):
        uc.update_status(ALICE, alice_booking.id, "confirmed")
    with pytest.raises(PermissionDeniedError):
        uc.update_status(ALICE, bob_booking.id, "canceled")

    assert uc.update_status(ALICE, alice_booking.id, "canceled").status == BookingStatus.canceled


def test_canceled_is_terminal_and_same_status_is_a_no_op():
    uc, bookings, _, email = _setup()
    booking = _book(bookings, ALICE, "11:00", "Alice")
    uc.update_status(STAFF, booking.id, "canceled")
    sent_before = len(email.sent)

    assert uc.update_status(STAFF, booking.id, "canceled").status == BookingStatus.canceled
    assert len(email.sent) == sent_before
    with pytest.raises(InvalidStatusTransitionError):
        uc.update_status(STAFF, booking.id, "confirmed")
    with pytest.raises(ValueError):
        uc.update_status(STAFF, booking.id, "archived")
    with pytest.raises(BookingNotFoundError):
        uc.update_status(STAFF, "missing", "canceled")


def test_kpis_count_open_payments():
    uc, bookings, waitlist, _ = _setup()
    first = _book(bookings, ALICE, "11:00", "Alice")
    _book(bookings, BOB, "13:00", "Bob")
    uc.update_status(STAFF, first.id, "canceled")
    waitlist.create_entry(NewWaitlistEntry("comb_twist", "Comb twist", "bob@example.com", ""), BOB.id)

    kpis = uc.kpis(STAFF)

    assert (kpis.bookings, kpis.waitlist, kpis.open_payments) == (2, 1, 1)
    assert uc.kpis(ALICE).waitlist == 0


def test_open_payments_skip_bookings_marked_paid():
    """A row whose payment status is paid is not an open payment even before deposit_paid is set."""
    uc, bookings, _, _ = _setup()
    paid = _book(bookings, ALICE, "11:00", "Alice")
    _book(bookings, BOB, "13:00", "Bob")
    bookings.update_payment(paid.id, PaymentUpdate(payment_status=PaymentStatus.paid, deposit_paid=False))

    assert uc.kpis(STAFF).open_payments == 1


def test_deposit_action_labels():
    base = Booking(id="a", service_id="s", service_name="S", duration_min=60, date_iso="2025-10-14", time="11:00", deposit=25)
    assert deposit_action_label(base, Role.customer) == "Pay deposit"
    assert deposit_action_label(replace(base, payment_status=PaymentStatus.pending), Role.customer) == "Resume deposit"
    assert deposit_action_label(replace(base, payment_status=PaymentStatus.failed), Role.customer) == "Retry payment"
    assert deposit_action_label(replace(base, deposit_paid=True), Role.customer) is None
    assert deposit_action_label(base.with_status(BookingStatus.canceled), Role.customer) is None
    assert deposit_action_label(base, Role.staff) is None


def test_waitlist_removal_and_clear_own_data():
    uc, bookings, waitlist, _ = _setup()
    _book(bookings, ALICE, "11:00", "Alice")
    _book(bookings, BOB, "13:00", "Bob")
    alice_entry = waitlist.create_entry(NewWaitlistEntry("comb_twist", "Comb twist", "alice@example.com", ""), ALICE.id)

    with pytest.raises(PermissionDeniedError):
        uc.remove_waitlist_entry(BOB, alice_entry.id)
    uc.remove_waitlist_entry(ALICE, alice_entry.id)
    assert uc.list_waitlist(ALICE) == []

    uc.clear_own_data(ALICE)
    assert uc.list_bookings(ALICE) == []
    assert len(uc.list_bookings(STAFF)) == 1


def test_csv_export_has_expected_header():
    uc, bookings, *_ = _setup()
    _book(bookings, ALICE, "11:00", "Alice")

    lines = uc.export_csv(STAFF).splitlines()

    assert lines[0] == "id,status,createdAt,date,time,service,durationMin,deposit,firstName,lastName,phone,email,address,notes"
    assert len(lines) == 2
    assert ",Alice,Example," in lines[1]


def test_profile_avatar_falls_back_to_initials():
    uc, *_ = _setup()
    profile = uc.get_profile(ALICE)
    assert profile.avatar_url.startswith("https://api.dicebear.com/")
    assert "seed=Alice%20Example" in profile.avatar_url

    saved = uc.save_profile(ALICE, full_name="Alice E.", phone="0151", avatar_url="javascript:alert(1)")
    assert saved.full_name == "Alice E."
    assert "seed=Alice%20E." in saved.avatar_url
    assert saved.role == Role.customer


def test_role_management_is_admin_only():
    uc, *_ = _setup()
    with pytest.raises(PermissionDeniedError):
        uc.set_role(STAFF, "bob@example.com", "staff")
    with pytest.raises(PermissionDeniedError):
        uc.list_users(STAFF)

    uc.set_role(ADMIN, "BOB@example.com", "staff")

    assert uc.role_of(BOB) == Role.staff
    assert len(uc.list_users(ADMIN)) == 4
    with pytest.raises(ValueError):
        uc.set_role(ADMIN, "bob@example.com", "superuser")
