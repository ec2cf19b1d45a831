from __future__ import annotations

import logging

from salon_booking.application.exceptions import PaymentProviderError
from salon_booking.application.ports.payment_gateway import PaymentGatewayPort
from salon_booking.domain.entities.payment import CheckoutRequest, CheckoutSession, PaymentEvent


class MockPaymentGateway(PaymentGatewayPort):
    def __init__(self) -> None:
        self._sessions: dict[str, CheckoutSession] = {}
        self._events: dict[str, PaymentEvent] = {}
        self._logger = logging.getLogger(__name__)

    def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSession:
        session_id = f"cs_mock_{len(self._sessions) + 1}"
        session = CheckoutSession(
            id=session_id,
            url=f"https://checkout.mock/{session_id}",
            payment_status="unpaid",
            amount_total=request.amount_cents,
            currency=request.currency,
            client_reference_id=request.booking_id,
            metadata=dict(request.metadata),
        )
        self._sessions[session_id] = session
        self._logger.info(
            "Mock checkout session created",
            extra={"session_id": session_id, "booking_id": request.booking_id},
        )
        return session

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise PaymentProviderError("No such checkout session", status_code=404)
        return session

    def retrieve_event(self, event_id: str) -> PaymentEvent:
        event = self._events.get(event_id)
        if event is None:
            raise PaymentProviderError("No such event", status_code=404)
        return event

    def mark_paid(self, session_id: str, payment_intent_id: str = "pi_mock") -> CheckoutSession:
        session = self.retrieve_checkout_session(session_id)
        paid = CheckoutSession(
            id=session.id,
            url=session.url,
            payment_status="paid",
            amount_total=session.amount_total,
            currency=session.currency,
            client_reference_id=session.client_reference_id,
            metadata=session.metadata,
            payment_intent_id=payment_intent_id,
            receipt_url=f"https://receipts.mock/{payment_intent_id}",
        )
        self._sessions[session_id] = paid
        return paid

    def record_event(self, event: PaymentEvent) -> None:
        if event.id:
            self._events[event.id] = event
