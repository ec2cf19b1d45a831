from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from salon_booking.application.exceptions import (
    BackendError,
    BookingNotFoundError,
    MissingRpcError,
    SlotUnavailableError,
)
from salon_booking.application.dto.supabase_rows import BookingRow
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.domain.entities.availability import SlotQuery
from salon_booking.domain.entities.booking import Booking, BookingStatus, NewBooking, PaymentUpdate
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.infrastructure.supabase.rest_client import SupabaseClient, eq, first_row

# exclusion_violation, unique_violation, and what create_booking_secure raises for taken slots
_CONFLICT_CODES = {"23P01", "23505", "P0001"}
_CONFLICT_HINTS = ("slot", "not available", "no longer available", "overlap", "capacity")


def is_slot_conflict(error: BackendError) -> bool:
    if error.status_code == 409:
        return True
    text = str(error).lower()
    if error.code in _CONFLICT_CODES:
        return error.code != "P0001" or any(h in text for h in _CONFLICT_HINTS)
    return False


def parse_booking(row: dict[str, Any] | None) -> Booking | None:
    if row is None:
        return None
    try:
        return BookingRow.model_validate(row).to_entity()
    except ValidationError as e:
        raise BackendError(f"Malformed booking row: {e.errors()[0].get('msg')}") from e


class SupabaseBookingRepository(BookingRepositoryPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def list_bookings(self, user_id: str | None = None) -> list[Booking]:
        filters = {"user_id": eq(user_id)} if user_id else {}
        rows = self._client.select("bookings", filters, order="created_at.desc")
        return [b for b in (parse_booking(r) for r in rows) if b is not None]

    def list_bookings_on(self, date_iso: str) -> list[Booking]:
        rows = self._client.select("bookings", {"date_iso": eq(date_iso)})
        return [b for b in (parse_booking(r) for r in rows) if b is not None]

    def get_booking(self, booking_id: str) -> Booking | None:
        rows = self._client.select("bookings", {"id": eq(booking_id)}, limit=1)
        return parse_booking(rows[0]) if rows else None

    def create_booking(self, booking: NewBooking, actor: AuthUser) -> Booking:
        params = {
            "p_service_id": booking.service_id,
            "p_service_name": booking.service_name,
            "p_duration_min": booking.duration_min,
            "p_price_from": booking.price_from or 0,
            "p_deposit": booking.deposit or 0,
            "p_stylist_id": booking.stylist_id or "auto",
            "p_stylist_name": booking.stylist_name,
            "p_date_iso": booking.date_iso,
            "p_time": booking.time,
            "p_customer": booking.customer.to_payload(),
            "p_deposit_paid": booking.deposit_paid,
        }
        try:
            try:
                data = self._client.rpc("create_booking_secure", params, access_token=actor.access_token)
                created = parse_booking(first_row(data))
            except MissingRpcError:
                self._logger.warning("create_booking_secure missing, inserting directly")
                created = parse_booking(
                    self._client.insert(
                        "bookings",
                        {
                            "user_id": actor.id,
                            "status": booking.status.value,
                            "service_id": booking.service_id,
                            "service_name": booking.service_name,
                            "duration_min": booking.duration_min,
                            "price_from": booking.price_from or 0,
                            "deposit": booking.deposit or 0,
                            "stylist_id": booking.stylist_id or "auto",
                            "stylist_name": booking.stylist_name,
                            "date_iso": booking.date_iso,
                            "time": booking.time,
                            "customer": booking.customer.to_payload(),
                            "deposit_paid": booking.deposit_paid,
                        },
                        access_token=actor.access_token,
                    )
                )
        except BackendError as e:
            if is_slot_conflict(e):
                raise SlotUnavailableError("This slot is no longer available. Please pick another time.") from e
            raise

        if created is None:
            raise BackendError("Backend returned no booking")
        self._logger.info("Booking created", extra={"booking_id": created.id, "user_id": actor.id})
        return created

    def set_status(self, booking_id: str, status: BookingStatus, actor: AuthUser) -> Booking:
        try:
            data = self._client.rpc(
                "set_booking_status",
                {"p_booking_id": booking_id, "p_status": status.value},
                access_token=actor.access_token,
            )
            updated = parse_booking(first_row(data))
        except MissingRpcError:
            updated = parse_booking(self._client.update("bookings", {"id": eq(booking_id)}, {"status": status.value}))
        if updated is None:
            raise BookingNotFoundError(booking_id)
        return updated

    def cancel_own_booking(self, booking_id: str, actor: AuthUser) -> Booking:
        try:
            data = self._client.rpc(
                "cancel_my_booking",
                {"p_booking_id": booking_id},
                access_token=actor.access_token,
            )
            updated = parse_booking(first_row(data))
        except MissingRpcError:
            updated = parse_booking(
                self._client.update(
                    "bookings",
                    {"id": eq(booking_id), "user_id": eq(actor.id)},
                    {"status": BookingStatus.canceled.value},
                )
            )
        if updated is None:
            raise BookingNotFoundError(booking_id)
        return updated

    def clear_bookings(self, user_id: str) -> None:
        self._client.delete("bookings", {"user_id": eq(user_id)})

    def update_payment(self, booking_id: str, update: PaymentUpdate) -> Booking | None:
        row = self._client.update("bookings", {"id": eq(booking_id)}, update.to_row())
        return parse_booking(row)

    def slot_is_available(self, query: SlotQuery) -> bool:
        data = self._client.rpc(
            "slot_is_available",
            {
                "p_date_iso": query.date_iso,
                "p_time": query.time,
                "p_duration_min": query.duration_min,
                "p_stylist_id": query.stylist_id,
                "p_exclude_booking_id": query.exclude_booking_id,
            },
        )
        return bool(data)
