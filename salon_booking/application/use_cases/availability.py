from __future__ import annotations

import logging
from datetime import date

from salon_booking.application.exceptions import BackendError, BackendNotConfiguredError
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.utils.slot_rules import (
    DEFAULT_CAPACITY,
    OpeningHours,
    candidate_start_times,
    is_bookable_day,
    is_slot_available,
    parse_date_iso,
    time_to_minutes,
)
from salon_booking.domain.entities.availability import DaySchedule, DaySlot, SlotCheck, SlotQuery
from salon_booking.domain.entities.booking import Booking


class AvailabilityUseCase:
    """
    Answers "is this slot free?" for the booking page.

    The backend procedure is authoritative. When it is missing or the backend
    cannot be reached, the same overlap rule is evaluated locally against the
    day's bookings.
    """

    def __init__(
        self,
        bookings: BookingRepositoryPort,
        hours: OpeningHours,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self._bookings = bookings
        self._hours = hours
        self._capacity = capacity
        self._logger = logging.getLogger(__name__)

    @property
    def hours(self) -> OpeningHours:
        return self._hours

    def check_slot(self, query: SlotQuery) -> SlotCheck:
        if query.duration_min <= 0:
            raise ValueError("Duration must be positive")
        parse_date_iso(query.date_iso)
        time_to_minutes(query.time)
        try:
            available = self._bookings.slot_is_available(query)
            return SlotCheck(available=available, source="remote")
        except BackendNotConfiguredError:
            raise
        except BackendError as e:
            self._logger.warning(
                "Remote slot check unavailable, using local rule",
                extra={"reason": str(e), "source": "local"},
            )

        day_bookings = self._bookings.list_bookings_on(query.date_iso)
        return SlotCheck(available=self._local_check(day_bookings, query), source="local")

    def list_day(
        self,
        date_iso: str,
        duration_min: int,
        stylist_id: str = "auto",
        today: date | None = None,
    ) -> DaySchedule:
        day = parse_date_iso(date_iso)
        if not is_bookable_day(day, today or date.today(), self._hours):
            raise ValueError(f"{date_iso} is not bookable")

        times = candidate_start_times(duration_min, self._hours)
        queries = [
            SlotQuery(date_iso=date_iso, time=t, duration_min=duration_min, stylist_id=stylist_id)
            for t in times
        ]

        source = "remote"
        slots: list[DaySlot] = []
        day_bookings: list[Booking] | None = None
        for query in queries:
            if day_bookings is None:
                try:
                    slots.append(DaySlot(time=query.time, available=self._bookings.slot_is_available(query)))
                    continue
                except BackendNotConfiguredError:
                    raise
                except BackendError as e:
                    self._logger.warning(
                        "Remote slot check unavailable, using local rule",
                        extra={"reason": str(e), "source": "local"},
                    )
                    # one fetch for the rest of the day, including the slots already answered remotely
                    day_bookings = self._bookings.list_bookings_on(date_iso)
                    source = "local"
                    slots = [DaySlot(time=s.time, available=self._local_check(day_bookings, q)) for s, q in zip(slots, queries)]
            slots.append(DaySlot(time=query.time, available=self._local_check(day_bookings, query)))

        return DaySchedule(
            date_iso=date_iso,
            duration_min=duration_min,
            open_start=self._hours.open_start,
            open_end=self._hours.open_end,
            slots=slots,
            source=source,
        )

    def _local_check(self, day_bookings: list[Booking], query: SlotQuery) -> bool:
        return is_slot_available(
            day_bookings,
            query.date_iso,
            query.time,
            query.duration_min,
            stylist_id=query.stylist_id,
            capacity=self._capacity,
            exclude_booking_id=query.exclude_booking_id,
        )
