from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from salon_booking.application.exceptions import (
    BookingNotFoundError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
)
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.waitlist_repository import WaitlistRepositoryPort
from salon_booking.application.use_cases.notifications import BookingNotifier
from salon_booking.application.utils.exports import bookings_to_csv
from salon_booking.application.utils.urls import avatar_from_seed, safe_http_url
from salon_booking.domain.entities.booking import (
    ALLOWED_STATUS_TRANSITIONS,
    Booking,
    BookingStatus,
    PaymentStatus,
)
from salon_booking.domain.entities.notification import NotificationEvent
from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile
from salon_booking.domain.entities.waitlist import WaitlistEntry

USER_LIST_LIMIT = 120

_STATUS_EVENTS = {
    BookingStatus.confirmed: NotificationEvent.booking_confirmed,
    BookingStatus.canceled: NotificationEvent.booking_canceled,
}


@dataclass(frozen=True)
class DashboardKpis:
    bookings: int
    waitlist: int
    open_payments: int


def filter_bookings(bookings: list[Booking], status: str | None = "all", search: str | None = "") -> list[Booking]:
    wanted = (status or "all").strip().lower()
    needle = (search or "").strip().lower()
    rows = []
    for b in bookings:
        if wanted != "all" and b.status.value != wanted:
            continue
        if needle:
            haystack = " ".join(
                [b.customer.first_name, b.customer.last_name, b.service_name, b.customer.phone]
            ).lower()
            if needle not in haystack:
                continue
        rows.append(b)
    return sorted(rows, key=lambda b: b.created_at or "", reverse=True)


def deposit_action_label(booking: Booking, role: Role) -> str | None:
    """Label for the customer's pay button, or None when no payment can be started."""
    if role.is_staff or booking.is_canceled or booking.is_paid:
        return None
    if booking.payment_status == PaymentStatus.pending:
        return "Resume deposit"
    if booking.payment_status == PaymentStatus.failed:
        return "Retry payment"
    return "Pay deposit"


class DashboardUseCase:
    def __init__(
        self,
        bookings: BookingRepositoryPort,
        waitlist: WaitlistRepositoryPort,
        profiles: ProfileRepositoryPort,
        notifier: BookingNotifier,
    ) -> None:
        self._bookings = bookings
        self._waitlist = waitlist
        self._profiles = profiles
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    def role_of(self, user: AuthUser) -> Role:
        return self._profiles.get_role(user.id)

    def list_bookings(self, user: AuthUser, status: str | None = "all", search: str | None = "") -> list[Booking]:
        return filter_bookings(self._visible_bookings(user), status, search)

    def kpis(self, user: AuthUser) -> DashboardKpis:
        bookings = self._visible_bookings(user)
        open_payments = sum(1 for b in bookings if not b.is_canceled and not b.is_paid)
        return DashboardKpis(
            bookings=len(bookings),
            waitlist=len(self.list_waitlist(user)),
            open_payments=open_payments,
        )

    def get_booking(self, user: AuthUser, booking_id: str) -> Booking:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError("Booking not found")
        if booking.user_id != user.id and not self.role_of(user).is_staff:
            raise PermissionDeniedError("Forbidden")
        return booking

    def update_status(self, user: AuthUser, booking_id: str, status: str | BookingStatus) -> Booking:
        try:
            target = BookingStatus(status)
        except ValueError:
            raise ValueError(f"Invalid status '{status}'")

        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError("Booking not found")

        role = self.role_of(user)
        if not role.is_staff:
            if target != BookingStatus.canceled:
                raise PermissionDeniedError("Only staff can confirm bookings")
            if booking.user_id != user.id:
                raise PermissionDeniedError("Forbidden")

        if booking.status == target:
            return booking
        if target not in ALLOWED_STATUS_TRANSITIONS[booking.status]:
            raise InvalidStatusTransitionError(f"Cannot change a {booking.status.value} booking to {target.value}")

        if role.is_staff:
            updated = self._bookings.set_status(booking_id, target, user)
        else:
            updated = self._bookings.cancel_own_booking(booking_id, user)

        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": target.value, "user_id": user.id},
        )
        event = _STATUS_EVENTS.get(target)
        if event is not None:
            self._notifier.notify_quietly(event, updated)
        return updated

    def deposit_action(self, user: AuthUser, booking: Booking) -> str | None:
        return deposit_action_label(booking, self.role_of(user))

    def list_waitlist(self, user: AuthUser) -> list[WaitlistEntry]:
        if self.role_of(user).is_staff:
            return self._waitlist.list_entries()
        return self._waitlist.list_entries(user_id=user.id)

    def remove_waitlist_entry(self, user: AuthUser, entry_id: str) -> None:
        entry = self._waitlist.get_entry(entry_id)
        if entry is None:
            raise LookupError("Waitlist entry not found")
        if entry.user_id != user.id and not self.role_of(user).is_staff:
            raise PermissionDeniedError("Forbidden")
        self._waitlist.remove_entry(entry_id)

    def clear_own_data(self, user: AuthUser) -> None:
        self._bookings.clear_bookings(user.id)
        self._waitlist.clear_entries(user.id)
        self._logger.info("Cleared user data", extra={"user_id": user.id})

    def export_csv(self, user: AuthUser, status: str | None = "all", search: str | None = "") -> str:
        return bookings_to_csv(self.list_bookings(user, status, search))

    def get_profile(self, user: AuthUser) -> UserProfile:
        profile = self._profiles.get_profile(user)
        return with_avatar_fallback(profile)

    def save_profile(
        self,
        user: AuthUser,
        full_name: str = "",
        phone: str = "",
        address: str = "",
        avatar_url: str = "",
    ) -> UserProfile:
        current = self._profiles.get_profile(user)
        saved = self._profiles.save_profile(
            replace(
                current,
                email=current.email or user.email,
                full_name=(full_name or "").strip(),
                phone=(phone or "").strip(),
                address=(address or "").strip(),
                avatar_url=safe_http_url(avatar_url),
            )
        )
        return with_avatar_fallback(saved)

    def set_role(self, user: AuthUser, email: str, role: str | Role) -> None:
        self._require_admin(user)
        if not (email or "").strip():
            raise ValueError("Email is required")
        try:
            target = Role(role)
        except ValueError:
            raise ValueError(f"Invalid role '{role}'")
        self._profiles.set_role_by_email(email.strip(), target, user)
        self._logger.info("Role changed", extra={"user_id": user.id, "status": target.value})

    def list_users(self, user: AuthUser, limit: int = USER_LIST_LIMIT) -> list[UserProfile]:
        self._require_admin(user)
        return self._profiles.list_users_with_roles(min(limit, USER_LIST_LIMIT), user)

    def _require_admin(self, user: AuthUser) -> None:
        if self.role_of(user) != Role.admin:
            raise PermissionDeniedError("Admin only")

    def _visible_bookings(self, user: AuthUser) -> list[Booking]:
        if self.role_of(user).is_staff:
            return self._bookings.list_bookings()
        return self._bookings.list_bookings(user_id=user.id)


def with_avatar_fallback(profile: UserProfile) -> UserProfile:
    if profile.avatar_url:
        return profile
    return replace(profile, avatar_url=avatar_from_seed(profile.full_name or profile.email))
