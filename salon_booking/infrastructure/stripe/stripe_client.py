from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from salon_booking.application.exceptions import PaymentNotConfiguredError, PaymentProviderError
from salon_booking.application.dto.stripe_objects import StripeCheckoutSessionDTO, StripeEventDTO
from salon_booking.application.ports.payment_gateway import PaymentGatewayPort
from salon_booking.domain.entities.payment import CheckoutRequest, CheckoutSession, PaymentEvent


def encode_checkout_form(request: CheckoutRequest) -> list[tuple[str, str]]:
    """Stripe wants bracketed form keys for nested objects."""
    form: list[tuple[str, str]] = [
        ("mode", "payment"),
        ("success_url", request.success_url),
        ("cancel_url", request.cancel_url),
        ("payment_method_types[0]", "card"),
        ("client_reference_id", request.booking_id),
        ("line_items[0][price_data][currency]", request.currency),
        ("line_items[0][price_data][unit_amount]", str(request.amount_cents)),
        ("line_items[0][price_data][product_data][name]", request.product_name),
        ("line_items[0][quantity]", "1"),
    ]
    if request.customer_email:
        form.append(("customer_email", request.customer_email))
    for key, value in request.metadata.items():
        form.append((f"metadata[{key}]", str(value)))
    return form


class StripeGateway(PaymentGatewayPort):
    def __init__(
        self,
        secret_key: str | None,
        base_url: str = "https://api.stripe.com/v1",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not secret_key:
            raise PaymentNotConfiguredError("Stripe is not configured (STRIPE_SECRET_KEY missing).")
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {secret_key}"},
        )
        self._logger = logging.getLogger(__name__)

    def create_checkout_session(self, request: CheckoutRequest) -> CheckoutSession:
        data = self._request("POST", "/checkout/sessions", data=encode_checkout_form(request))
        session = self._session(data)
        self._logger.info(
            "Checkout session created",
            extra={"booking_id": request.booking_id, "session_id": session.id},
        )
        return session

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        data = self._request(
            "GET",
            f"/checkout/sessions/{session_id}",
            params={"expand[]": "payment_intent.latest_charge"},
        )
        return self._session(data)

    def retrieve_event(self, event_id: str) -> PaymentEvent:
        data = self._request("GET", f"/events/{event_id}")
        try:
            return StripeEventDTO.model_validate(data).to_entity()
        except ValidationError as e:
            raise PaymentProviderError(f"Malformed Stripe event: {e.errors()[0].get('msg')}") from e

    def _session(self, data: Any) -> CheckoutSession:
        try:
            return StripeCheckoutSessionDTO.model_validate(data).to_entity()
        except ValidationError as e:
            raise PaymentProviderError(f"Malformed Stripe session: {e.errors()[0].get('msg')}") from e

    def _request(
        self,
        method: str,
        path: str,
        *,
        data: list[tuple[str, str]] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            resp = self._client.request(method, path, params=params, data=dict(data) if data is not None else None)
        except httpx.HTTPError as e:
            self._logger.error("Stripe request failed", extra={"path": path, "error": str(e)})
            raise PaymentProviderError(f"Stripe is unreachable: {e}") from e

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if resp.status_code >= 400:
            error = payload.get("error") if isinstance(payload, dict) else None
            message = (error or {}).get("message") if isinstance(error, dict) else None
            self._logger.error(
                "Stripe error",
                extra={"path": path, "status": resp.status_code, "reason": message},
            )
            raise PaymentProviderError(message or "Stripe error", status_code=resp.status_code)
        return payload if isinstance(payload, dict) else {}
