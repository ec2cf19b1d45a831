from __future__ import annotations

import logging

import httpx

from salon_booking.application.exceptions import NotificationDeliveryError
from salon_booking.application.ports.notifier import EmailSenderPort
from salon_booking.domain.entities.notification import DeliveryResult


class ResendEmailSender(EmailSenderPort):
    def __init__(
        self,
        api_key: str | None,
        from_email: str | None,
        endpoint: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._from_email = from_email
        self._endpoint = endpoint
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    def send_email(self, to: str | None, subject: str, text: str) -> DeliveryResult:
        if not self._api_key or not self._from_email or not to:
            return DeliveryResult(sent=False, skipped=True)

        try:
            resp = self._client.post(
                self._endpoint,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"from": self._from_email, "to": [to], "subject": subject, "text": text},
            )
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Resend is unreachable: {e}") from e
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            self._logger.error("Resend send failed", extra={"status": resp.status_code, "reason": message})
            raise NotificationDeliveryError(message or "Resend error")
        return DeliveryResult(sent=True, reference=data.get("id") if isinstance(data, dict) else None)
