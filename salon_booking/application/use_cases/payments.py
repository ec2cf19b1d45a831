from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from salon_booking.application.dto.stripe_objects import StripeCheckoutSessionDTO, StripeEventDTO
from salon_booking.application.exceptions import (
    AuthenticationError,
    BookingNotFoundError,
    PaymentConflictError,
    PaymentNotConfiguredError,
    PaymentProviderError,
    PermissionDeniedError,
    WebhookVerificationError,
)
from salon_booking.application.ports.booking_repository import BookingRepositoryPort
from salon_booking.application.ports.payment_gateway import PaymentGatewayPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.utils.formatting import to_cents
from salon_booking.application.utils.urls import is_allowed_return_url
from salon_booking.domain.entities.booking import Booking, PaymentStatus, PaymentUpdate
from salon_booking.domain.entities.payment import CheckoutRequest, CheckoutSession, PaymentEvent
from salon_booking.domain.entities.profile import AuthUser

SUCCESS_EVENTS = frozenset({"checkout.session.completed", "checkout.session.async_payment_succeeded"})
FAILURE_EVENTS = frozenset({"checkout.session.expired", "checkout.session.async_payment_failed"})

NOT_CONFIGURED_MESSAGE = "Stripe is not configured (STRIPE_SECRET_KEY missing)."


@dataclass(frozen=True)
class CheckoutResult:
    id: str
    url: str | None
    booking_id: str


@dataclass(frozen=True)
class VerifiedPayment:
    session: CheckoutSession
    booking_id: str | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.session.id,
            "paid": self.session.is_paid,
            "payment_status": self.session.payment_status,
            "amount_total": self.session.amount_total,
            "currency": self.session.currency,
            "metadata": self.session.metadata,
            "booking_id": self.booking_id,
            "payment_intent_id": self.session.payment_intent_id,
            "payment_receipt_url": self.session.receipt_url,
        }


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def payment_update_from_session(session: CheckoutSession, paid: bool, failed_status: PaymentStatus) -> PaymentUpdate:
    reference = session.payment_intent_id or session.id or None
    return PaymentUpdate(
        payment_status=PaymentStatus.paid if paid else failed_status,
        deposit_paid=paid,
        payment_reference=reference,
        stripe_checkout_session_id=session.id or None,
        stripe_payment_intent_id=session.payment_intent_id,
        payment_receipt_url=session.receipt_url,
        paid_at=_utc_now_iso() if paid else None,
    )


class _BookingAccess:
    def __init__(self, bookings: BookingRepositoryPort, profiles: ProfileRepositoryPort) -> None:
        self._bookings = bookings
        self._profiles = profiles

    def accessible_booking(self, booking_id: str, user: AuthUser) -> Booking:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError("Booking not found.")
        if booking.user_id != user.id and not self._profiles.get_role(user.id).is_staff:
            raise PermissionDeniedError("You do not have access to this booking.")
        return booking


class CreateCheckoutSessionUseCase:
    def __init__(
        self,
        gateway: PaymentGatewayPort | None,
        bookings: BookingRepositoryPort,
        profiles: ProfileRepositoryPort,
        allowed_origin: str,
        currency: str = "eur",
    ) -> None:
        self._gateway = gateway
        self._bookings = bookings
        self._access = _BookingAccess(bookings, profiles)
        self._allowed_origin = allowed_origin
        self._currency = currency
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        booking_id: str | None,
        user: AuthUser | None,
        success_url: str | None = None,
        cancel_url: str | None = None,
        request_origin: str | None = None,
    ) -> CheckoutResult:
        if self._gateway is None:
            raise PaymentNotConfiguredError(NOT_CONFIGURED_MESSAGE)
        booking_id = (booking_id or "").strip()
        if not booking_id:
            raise ValueError("bookingId is missing.")
        if user is None:
            raise AuthenticationError("Not signed in.")

        booking = self._access.accessible_booking(booking_id, user)
        if booking.is_paid:
            raise PaymentConflictError("The deposit has already been paid.")
        if booking.is_canceled:
            raise PaymentConflictError("Canceled bookings cannot be paid.")

        amount_cents = to_cents(booking.deposit)
        if not amount_cents:
            raise ValueError("Invalid deposit.")

        origin = (request_origin or "").rstrip("/")
        success = success_url or (
            f"{origin}/booking.html?payment=success&session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking.id}"
        )
        cancel = cancel_url or f"{origin}/booking.html?payment=cancel&booking_id={booking.id}"
        if not (
            is_allowed_return_url(success, self._allowed_origin, origin or None)
            and is_allowed_return_url(cancel, self._allowed_origin, origin or None)
        ):
            raise ValueError("Invalid return URL. Check ALLOWED_ORIGIN and the frontend domain.")

        customer = booking.customer
        session = self._gateway.create_checkout_session(
            CheckoutRequest(
                booking_id=booking.id,
                amount_cents=amount_cents,
                currency=self._currency,
                product_name=f"Deposit: {booking.service_name or 'Appointment'}",
                success_url=success,
                cancel_url=cancel,
                customer_email=customer.email or None,
                metadata={
                    "booking_id": booking.id,
                    "user_id": booking.user_id or "",
                    "service_name": booking.service_name,
                    "date_iso": booking.date_iso,
                    "time": booking.time,
                    "first_name": customer.first_name,
                    "last_name": customer.last_name,
                    "phone": customer.phone,
                },
            )
        )

        self._bookings.update_payment(
            booking.id,
            PaymentUpdate(
                payment_status=PaymentStatus.pending,
                deposit_paid=False,
                payment_reference=session.id,
                stripe_checkout_session_id=session.id,
            ),
        )
        self._logger.info(
            "Deposit checkout started",
            extra={"booking_id": booking.id, "session_id": session.id, "user_id": user.id},
        )
        return CheckoutResult(id=session.id, url=session.url, booking_id=booking.id)


class VerifyCheckoutSessionUseCase:
    def __init__(
        self,
        gateway: PaymentGatewayPort | None,
        bookings: BookingRepositoryPort,
        profiles: ProfileRepositoryPort,
    ) -> None:
        self._gateway = gateway
        self._bookings = bookings
        self._access = _BookingAccess(bookings, profiles)
        self._logger = logging.getLogger(__name__)

    def execute(self, session_id: str | None, user: AuthUser | None) -> VerifiedPayment:
        if self._gateway is None:
            raise PaymentNotConfiguredError(NOT_CONFIGURED_MESSAGE)
        if not session_id:
            raise ValueError("session_id is missing.")
        if user is None:
            raise AuthenticationError("Not signed in.")

        session = self._gateway.retrieve_checkout_session(session_id)
        booking_id = session.booking_id
        if booking_id:
            self._access.accessible_booking(booking_id, user)
            self._bookings.update_payment(
                booking_id,
                payment_update_from_session(session, session.is_paid, failed_status=PaymentStatus.unpaid),
            )
            self._logger.info(
                "Checkout session verified",
                extra={"booking_id": booking_id, "session_id": session.id, "status": session.payment_status},
            )
        return VerifiedPayment(session=session, booking_id=booking_id)


class HandlePaymentWebhookUseCase:
    """
    Applies Stripe checkout events to bookings.

    The caller checks the Stripe-Signature header against the raw body. When
    it did not verify (or no webhook secret is set) the event is fetched again
    from Stripe by its id, so only events Stripe itself knows about are applied.
    """

    def __init__(
        self,
        gateway: PaymentGatewayPort | None,
        bookings: BookingRepositoryPort,
        webhook_secret: str | None,
    ) -> None:
        self._gateway = gateway
        self._bookings = bookings
        self._webhook_secret = webhook_secret
        self._logger = logging.getLogger(__name__)

    def execute(self, raw_body: bytes, signature_valid: bool) -> dict[str, Any]:
        if not self._webhook_secret and self._gateway is None:
            raise PaymentNotConfiguredError(
                "Stripe webhook is not configured (STRIPE_WEBHOOK_SECRET or STRIPE_SECRET_KEY missing)."
            )

        event = self._resolve_event(raw_body, signature_valid)
        if event.type not in SUCCESS_EVENTS and event.type not in FAILURE_EVENTS:
            self._logger.info("Ignoring Stripe event", extra={"event": event.type})
            return {"received": True, "ignored": True, "event": event.type}

        session = self._session_from_event(event)
        booking_id = session.booking_id
        if not booking_id:
            self._logger.warning("Stripe event without booking id", extra={"event": event.type})
            return {"received": True, "ignored": True, "event": event.type, "reason": "booking_id missing"}

        paid = event.type in SUCCESS_EVENTS
        self._bookings.update_payment(
            booking_id,
            payment_update_from_session(session, paid, failed_status=PaymentStatus.failed),
        )
        self._logger.info(
            "Payment status updated from webhook",
            extra={"booking_id": booking_id, "event": event.type, "status": "paid" if paid else "failed"},
        )
        return {"received": True, "event": event.type, "bookingId": booking_id, "sessionId": session.id or None}

    def _resolve_event(self, raw_body: bytes, signature_valid: bool) -> PaymentEvent:
        parsed = _parse_json(raw_body)

        if raw_body and self._webhook_secret and signature_valid:
            if parsed is None:
                raise ValueError("Webhook body is not valid JSON.")
            try:
                return StripeEventDTO.model_validate(parsed).to_entity()
            except ValidationError as e:
                raise ValueError(f"Malformed Stripe event: {e.errors()[0].get('msg')}") from e

        event_id = parsed.get("id") if isinstance(parsed, dict) else None
        if not event_id:
            raise WebhookVerificationError("Invalid Stripe signature and no event id for the fallback lookup.")
        if self._gateway is None:
            raise WebhookVerificationError("STRIPE_SECRET_KEY is missing for the fallback verification.")

        self._logger.info("Signature not verified, fetching event from Stripe", extra={"event": str(event_id)})
        try:
            return self._gateway.retrieve_event(str(event_id))
        except PaymentProviderError as e:
            raise WebhookVerificationError(str(e)) from e

    def _session_from_event(self, event: PaymentEvent) -> CheckoutSession:
        obj = dict(event.data_object)
        try:
            session = StripeCheckoutSessionDTO.model_validate({**obj, "id": obj.get("id") or ""}).to_entity()
        except ValidationError as e:
            raise ValueError(f"Malformed checkout session in event: {e.errors()[0].get('msg')}") from e

        if session.id and self._gateway is not None:
            try:
                expanded = self._gateway.retrieve_checkout_session(session.id)
            except PaymentProviderError as e:
                self._logger.warning(
                    "Could not expand checkout session, using event payload",
                    extra={"session_id": session.id, "reason": str(e)},
                )
            else:
                if expanded.id:
                    return expanded
        return session


def _parse_json(raw_body: bytes) -> Any:
    if not raw_body:
        return None
    try:
        return json.loads(raw_body)
    except ValueError:
        return None
