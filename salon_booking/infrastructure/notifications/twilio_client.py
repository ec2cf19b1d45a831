from __future__ import annotations

import logging

import httpx

from salon_booking.application.exceptions import NotificationDeliveryError
from salon_booking.application.ports.notifier import SmsSenderPort
from salon_booking.domain.entities.notification import DeliveryResult


class TwilioSmsSender(SmsSenderPort):
    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        from_number: str | None,
        api_base: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._api_base = api_base.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    def send_sms(self, to: str | None, text: str) -> DeliveryResult:
        if not self._account_sid or not self._auth_token or not self._from_number or not to:
            return DeliveryResult(sent=False, skipped=True)

        try:
            resp = self._client.post(
                f"{self._api_base}/Accounts/{self._account_sid}/Messages.json",
                auth=(self._account_sid, self._auth_token),
                data={"To": to, "From": self._from_number, "Body": text},
            )
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Twilio is unreachable: {e}") from e
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            message = data.get("message") if isinstance(data, dict) else None
            self._logger.error("Twilio send failed", extra={"status": resp.status_code, "reason": message})
            raise NotificationDeliveryError(message or "Twilio error")
        return DeliveryResult(sent=True, reference=data.get("sid") if isinstance(data, dict) else None)
