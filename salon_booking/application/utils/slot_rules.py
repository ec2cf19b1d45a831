from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from salon_booking.domain.entities.booking import Booking
from salon_booking.domain.entities.stylist import AUTO_STYLIST_ID

DEFAULT_CAPACITY = 4

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class OpeningHours:
    weekdays: frozenset[int]  # Monday == 0
    open_start: str = "11:00"
    open_end: str = "19:30"
    step_minutes: int = 30
    max_days_ahead: int = 60


def time_to_minutes(value: str) -> int:
    match = _TIME_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return hour * 60 + minute


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date_iso(value: str) -> date:
    try:
        return date.fromisoformat((value or "").strip())
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD")


def overlaps(a_start: str, a_duration: int, b_start: str, b_duration: int) -> bool:
    """Half-open intervals: [a, a+dur) and [b, b+dur) overlap iff a < b_end and b < a_end."""
    a0 = time_to_minutes(a_start)
    b0 = time_to_minutes(b_start)
    return a0 < b0 + b_duration and b0 < a0 + a_duration


def active_bookings_on(
    bookings: Iterable[Booking],
    date_iso: str,
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    return [
        b
        for b in bookings
        if b.date_iso == date_iso and not b.is_canceled and (exclude_booking_id is None or b.id != exclude_booking_id)
    ]


def is_slot_available(
    bookings: Iterable[Booking],
    date_iso: str,
    start_time: str,
    duration_min: int,
    stylist_id: str | None = AUTO_STYLIST_ID,
    capacity: int = DEFAULT_CAPACITY,
    exclude_booking_id: str | None = None,
) -> bool:
    """
    A named stylist serves one client at a time. Without a stylist preference
    the salon seats up to `capacity` overlapping appointments across all stylists.
    """
    if duration_min <= 0:
        raise ValueError("Duration must be positive")

    same_day = active_bookings_on(bookings, date_iso, exclude_booking_id)
    if stylist_id and stylist_id != AUTO_STYLIST_ID:
        return not any(
            b.stylist_id == stylist_id and overlaps(b.time, b.duration_min, start_time, duration_min)
            for b in same_day
        )

    overlapping = sum(1 for b in same_day if overlaps(b.time, b.duration_min, start_time, duration_min))
    return overlapping < capacity


def candidate_start_times(duration_min: int, hours: OpeningHours) -> list[str]:
    start = time_to_minutes(hours.open_start)
    end = time_to_minutes(hours.open_end)
    times: list[str] = []
    current = start
    while current + duration_min <= end:
        times.append(minutes_to_time(current))
        current += hours.step_minutes
    return times


def is_bookable_day(day: date, today: date, hours: OpeningHours) -> bool:
    if day.weekday() not in hours.weekdays:
        return False
    if day < today:
        return False
    return day <= today + timedelta(days=hours.max_days_ahead)
