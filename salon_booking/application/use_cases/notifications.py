from __future__ import annotations

import logging

from salon_booking.application.exceptions import (
    AuthenticationError,
    BookingNotFoundError,
    NotificationDeliveryError,
    PermissionDeniedError,
)
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.notifier import EmailSenderPort, SmsSenderPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.utils.message_templates import (
    build_notification_message,
    build_notification_subject,
)
from salon_booking.domain.entities.booking import Booking
from salon_booking.domain.entities.notification import NotificationEvent, NotificationResult
from salon_booking.domain.entities.profile import AuthUser


def parse_event(value: str | None) -> NotificationEvent:
    try:
        return NotificationEvent(value or "")
    except ValueError:
        raise ValueError("Invalid eventType")


class BookingNotifier:
    """Renders the customer message for a booking event and sends it by email and SMS."""

    def __init__(self, email: EmailSenderPort, sms: SmsSenderPort, business_name: str) -> None:
        self._email = email
        self._sms = sms
        self._business_name = business_name
        self._logger = logging.getLogger(__name__)

    def notify(self, event: NotificationEvent, booking: Booking) -> NotificationResult:
        text = build_notification_message(event, booking, self._business_name)
        subject = build_notification_subject(event, self._business_name)

        email_result = self._email.send_email(booking.customer.email or None, subject, text)
        sms_result = self._sms.send_sms(booking.customer.phone or None, text)

        self._logger.info(
            "Booking notification dispatched",
            extra={
                "booking_id": booking.id,
                "event": event.value,
                "status": f"email={'sent' if email_result.sent else 'skipped'} sms={'sent' if sms_result.sent else 'skipped'}",
            },
        )
        return NotificationResult(email=email_result, sms=sms_result)

    def notify_quietly(self, event: NotificationEvent, booking: Booking) -> NotificationResult | None:
        """Fire-and-forget variant for flows where a failed message must not undo the booking change."""
        try:
            return self.notify(event, booking)
        except NotificationDeliveryError as e:
            self._logger.warning(
                "Booking notification failed",
                extra={"booking_id": booking.id, "event": event.value, "reason": str(e)},
            )
            return None


class SendBookingNotificationUseCase:
    def __init__(
        self,
        bookings: BookingRepositoryPort,
        profiles: ProfileRepositoryPort,
        notifier: BookingNotifier,
    ) -> None:
        self._bookings = bookings
        self._profiles = profiles
        self._notifier = notifier

    def execute(self, event_type: str | None, booking_id: str | None, user: AuthUser | None) -> NotificationResult:
        event = parse_event(event_type)
        if not booking_id:
            raise ValueError("Missing booking.id")
        if user is None:
            raise AuthenticationError("Unauthorized")

        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError("Booking not found")

        is_staff = self._profiles.get_role(user.id).is_staff
        if not is_staff and booking.user_id != user.id:
            raise PermissionDeniedError("Forbidden")
        if event == NotificationEvent.booking_confirmed and not is_staff:
            raise PermissionDeniedError("Only staff can send confirmations")

        return self._notifier.notify(event, booking)
