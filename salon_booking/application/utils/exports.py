from __future__ import annotations

import csv
import io
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from salon_booking.domain.entities.booking import Booking

CSV_COLUMNS = (
    "id",
    "status",
    "createdAt",
    "date",
    "time",
    "service",
    "durationMin",
    "deposit",
    "firstName",
    "lastName",
    "phone",
    "email",
    "address",
    "notes",
)


def bookings_to_csv(bookings: list[Booking]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for b in bookings:
        c = b.customer
        writer.writerow(
            [
                b.id,
                b.status.value,
                b.created_at or "",
                b.date_iso,
                b.time,
                b.service_name,
                b.duration_min,
                b.deposit,
                c.first_name,
                c.last_name,
                c.phone,
                c.email,
                c.address,
                c.notes,
            ]
        )
    return buffer.getvalue()


def _ics_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def booking_to_ics(
    booking: Booking,
    tz: ZoneInfo,
    business_name: str,
    location: str,
    now: datetime | None = None,
) -> str:
    start = datetime.fromisoformat(f"{booking.date_iso}T{booking.time}:00").replace(tzinfo=tz)
    end = start + timedelta(minutes=booking.duration_min)
    stamp = now or datetime.now(timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{business_name}//Booking//EN",
        "BEGIN:VEVENT",
        f"UID:{booking.id}@salon-booking",
        f"DTSTAMP:{_ics_timestamp(stamp)}",
        f"DTSTART:{_ics_timestamp(start)}",
        f"DTEND:{_ics_timestamp(end)}",
        f"SUMMARY:{booking.service_name} – {business_name}",
        f"LOCATION:{location}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines)
