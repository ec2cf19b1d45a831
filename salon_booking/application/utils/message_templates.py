from __future__ import annotations

from salon_booking.domain.entities.booking import Booking
from salon_booking.domain.entities.notification import NotificationEvent
from salon_booking.application.utils.formatting import format_date_label


def build_notification_message(event: NotificationEvent, booking: Booking, business_name: str) -> str:
    first_name = booking.customer.first_name or "there"
    date_label = format_date_label(booking.date_iso)
    service = booking.service_name or "appointment"

    if event == NotificationEvent.booking_confirmed:
        return f"Hi {first_name}, your appointment on {date_label} at {booking.time} for {service} is confirmed. – {business_name}"
    if event == NotificationEvent.booking_canceled:
        return (
            f"Hi {first_name}, your appointment on {date_label} at {booking.time} has been canceled. "
            f"Please get in touch to book a new one. – {business_name}"
        )
    return (
        f"Hi {first_name}, we received your request for {date_label} at {booking.time} for {service}. "
        f"We will confirm it shortly. – {business_name}"
    )


def build_notification_subject(event: NotificationEvent, business_name: str) -> str:
    if event == NotificationEvent.booking_confirmed:
        return f"Appointment confirmed – {business_name}"
    if event == NotificationEvent.booking_canceled:
        return f"Appointment canceled – {business_name}"
    return f"Appointment request received – {business_name}"
