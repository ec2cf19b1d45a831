from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.availability import SlotQuery
from salon_booking.domain.entities.booking import Booking, BookingStatus, NewBooking, PaymentUpdate
from salon_booking.domain.entities.profile import AuthUser


class BookingRepositoryPort(ABC):
    @abstractmethod
    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        """List bookings newest first. None means every user's bookings."""
        raise NotImplementedError

    @abstractmethod
    def list_bookings_on(self, date_iso: str) -> list[Booking]:
        """All bookings for a calendar day, across users."""
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def create_booking(self, booking: NewBooking, actor: AuthUser) -> Booking:
        """Insert atomically. Raises SlotUnavailableError when the slot was taken meanwhile."""
        raise NotImplementedError

    @abstractmethod
    def set_status(self, booking_id: str, status: BookingStatus, actor: AuthUser) -> Booking:
        raise NotImplementedError

    @abstractmethod
    def cancel_own_booking(self, booking_id: str, actor: AuthUser) -> Booking:
        raise NotImplementedError

    @abstractmethod
    def clear_bookings(self, user_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_payment(self, booking_id: str, update: PaymentUpdate) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def slot_is_available(self, query: SlotQuery) -> bool:
        """Authoritative availability check. Raises MissingRpcError when the backend lacks it."""
        raise NotImplementedError
