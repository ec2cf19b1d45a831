from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from salon_booking.application.exceptions import (
    AuthenticationError,
    BookingNotFoundError,
    PermissionDeniedError,
    SlotUnavailableError,
)
from salon_booking.application.ports.auth_provider import AuthProviderPort
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.ports.waitlist_repository import WaitlistRepositoryPort
from salon_booking.application.utils.slot_rules import DEFAULT_CAPACITY, is_slot_available
from salon_booking.domain.entities.availability import SlotQuery
from salon_booking.domain.entities.booking import Booking, BookingStatus, NewBooking, PaymentUpdate
from salon_booking.domain.entities.profile import AuthSession, AuthUser, Role, UserProfile
from salon_booking.domain.entities.waitlist import NewWaitlistEntry, WaitlistEntry


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryBookingRepository(BookingRepositoryPort):
    """Holds bookings in process. Inserts re-check the slot under a lock, like the remote atomic procedure."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._bookings: dict[str, Booking] = {}
        self._capacity = capacity
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        rows = [b for b in self._snapshot() if user_id is None or b.user_id == user_id]
        return sorted(rows, key=lambda b: b.created_at or "", reverse=True)

    def list_bookings_on(self, date_iso: str) -> list[Booking]:
        return [b for b in self._snapshot() if b.date_iso == date_iso]

    def get_booking(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def create_booking(self, booking: NewBooking, actor: AuthUser) -> Booking:
        with self._lock:
            if not self._is_free(
                SlotQuery(
                    date_iso=booking.date_iso,
                    time=booking.time,
                    duration_min=booking.duration_min,
                    stylist_id=booking.stylist_id,
                )
            ):
                raise SlotUnavailableError("This slot is no longer available. Please pick another time.")

            created = Booking(
                id=uuid.uuid4().hex,
                user_id=actor.id,
                status=booking.status,
                created_at=_now_iso(),
                service_id=booking.service_id,
                service_name=booking.service_name,
                duration_min=booking.duration_min,
                price_from=booking.price_from,
                deposit=booking.deposit,
                stylist_id=booking.stylist_id,
                stylist_name=booking.stylist_name,
                date_iso=booking.date_iso,
                time=booking.time,
                customer=booking.customer,
                deposit_paid=booking.deposit_paid,
            )
            self._bookings[created.id] = created
        self._logger.info("Booking stored in memory", extra={"booking_id": created.id})
        return created

    def set_status(self, booking_id: str, status: BookingStatus, actor: AuthUser) -> Booking:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                raise BookingNotFoundError(booking_id)
            updated = current.with_status(status)
            self._bookings[booking_id] = updated
        return updated

    def cancel_own_booking(self, booking_id: str, actor: AuthUser) -> Booking:
        current = self.get_booking(booking_id)
        if current is None:
            raise BookingNotFoundError(booking_id)
        if current.user_id != actor.id:
            raise PermissionDeniedError("Only your own bookings can be canceled.")
        return self.set_status(booking_id, BookingStatus.canceled, actor)

    def clear_bookings(self, user_id: str) -> None:
        with self._lock:
            for booking_id in [b.id for b in self._bookings.values() if b.user_id == user_id]:
                del self._bookings[booking_id]

    def update_payment(self, booking_id: str, update: PaymentUpdate) -> Booking | None:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None:
                return None
            updated = replace(
                current,
                payment_status=update.payment_status,
                deposit_paid=update.deposit_paid,
                payment_provider=update.payment_provider,
                payment_reference=update.payment_reference,
                stripe_checkout_session_id=update.stripe_checkout_session_id,
                stripe_payment_intent_id=update.stripe_payment_intent_id,
                payment_receipt_url=update.payment_receipt_url,
                paid_at=update.paid_at,
            )
            self._bookings[booking_id] = updated
        return updated

    def slot_is_available(self, query: SlotQuery) -> bool:
        with self._lock:
            return self._is_free(query)

    def _snapshot(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings.values())

    def _is_free(self, query: SlotQuery) -> bool:
        # caller holds self._lock
        return is_slot_available(
            self._bookings.values(),
            query.date_iso,
            query.time,
            query.duration_min,
            stylist_id=query.stylist_id,
            capacity=self._capacity,
            exclude_booking_id=query.exclude_booking_id,
        )


class MemoryWaitlistRepository(WaitlistRepositoryPort):
    def __init__(self) -> None:
        self._entries: dict[str, WaitlistEntry] = {}
        self._lock = threading.Lock()

    def list_entries(self, user_id: str | None = None) -> list[WaitlistEntry]:
        with self._lock:
            rows = [e for e in self._entries.values() if user_id is None or e.user_id == user_id]
        return sorted(rows, key=lambda e: e.created_at or "", reverse=True)

    def get_entry(self, entry_id: str) -> WaitlistEntry | None:
        with self._lock:
            return self._entries.get(entry_id)

    def create_entry(self, entry: NewWaitlistEntry, user_id: str | None) -> WaitlistEntry:
        created = WaitlistEntry(
            id=uuid.uuid4().hex,
            user_id=user_id,
            created_at=_now_iso(),
            service_id=entry.service_id,
            service_name=entry.service_name,
            email=entry.email,
            phone=entry.phone,
            note=entry.note,
        )
        with self._lock:
            self._entries[created.id] = created
        return created

    def remove_entry(self, entry_id: str) -> None:
        with self._lock:
            self._entries.pop(entry_id, None)

    def clear_entries(self, user_id: str) -> None:
        with self._lock:
            for entry_id in [e.id for e in self._entries.values() if e.user_id == user_id]:
                del self._entries[entry_id]


class MemoryProfileRepository(ProfileRepositoryPort):
    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def add_profile(self, profile: UserProfile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile

    def get_role(self, user_id: str) -> Role:
        profile = self._profiles.get(user_id)
        return profile.role if profile else Role.customer

    def get_profile(self, user: AuthUser) -> UserProfile:
        with self._lock:
            profile = self._profiles.get(user.id)
            if profile is None:
                profile = UserProfile(id=user.id, email=user.email)
                self._profiles[user.id] = profile
        return profile

    def save_profile(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            existing = self._profiles.get(profile.id)
            saved = replace(profile, role=existing.role if existing else Role.customer)
            self._profiles[profile.id] = saved
        return saved

    def set_role_by_email(self, email: str, role: Role, actor: AuthUser) -> None:
        normalized = email.strip().lower()
        with self._lock:
            for profile in self._profiles.values():
                if (profile.email or "").lower() == normalized:
                    self._profiles[profile.id] = replace(profile, role=role)
                    return
        raise ValueError(f"No user found for {email}")

    def list_users_with_roles(self, limit: int, actor: AuthUser) -> list[UserProfile]:
        with self._lock:
            rows = list(self._profiles.values())
        rows = sorted(rows, key=lambda p: (p.full_name or p.email or "").lower())
        return rows[:limit]


class MemoryAuthProvider(AuthProviderPort):
    def __init__(self, profiles: MemoryProfileRepository | None = None) -> None:
        self._users: dict[str, tuple[str, str]] = {}  # email -> (user_id, password)
        self._tokens: dict[str, AuthUser] = {}
        self._profiles = profiles

    def register(self, email: str, password: str, role: Role = Role.customer, user_id: str | None = None) -> AuthUser:
        normalized = email.strip().lower()
        uid = user_id or uuid.uuid4().hex
        self._users[normalized] = (uid, password)
        if self._profiles is not None:
            self._profiles.add_profile(UserProfile(id=uid, email=normalized, role=role))
        return AuthUser(id=uid, email=normalized)

    def issue_token(self, user: AuthUser) -> str:
        token = uuid.uuid4().hex
        self._tokens[token] = AuthUser(id=user.id, email=user.email, access_token=token)
        return token

    def get_user(self, access_token: str) -> AuthUser | None:
        return self._tokens.get(access_token)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        record = self._users.get(email.strip().lower())
        if record is None or record[1] != password:
            raise AuthenticationError("Invalid login credentials")
        user = AuthUser(id=record[0], email=email.strip().lower())
        token = self.issue_token(user)
        return AuthSession(access_token=token, user=self._tokens[token])

    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> AuthUser | None:
        if email.strip().lower() in self._users:
            raise ValueError("User already registered")
        if len(password) < 6:
            raise ValueError("Password should be at least 6 characters")
        return self.register(email, password)

    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        return None

    def sign_out(self, access_token: str) -> None:
        self._tokens.pop(access_token, None)
