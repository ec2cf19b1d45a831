from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.payment import CheckoutRequest, CheckoutSession, PaymentEvent


class PaymentGatewayPort(ABC):
    @abstractmethod
    def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSession:
        raise NotImplementedError

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a session with its payment intent and latest charge expanded."""
        raise NotImplementedError

    @abstractmethod
    def retrieve_event(self, event_id: str) -> PaymentEvent:
        raise NotImplementedError
