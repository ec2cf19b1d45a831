from __future__ import annotations

import logging

from salon_booking.application.ports.notifier import EmailSenderPort, SmsSenderPort
from salon_booking.domain.entities.notification import DeliveryResult


class MockEmailSender(EmailSenderPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send_email(self, to: str | None, subject: str, text: str) -> DeliveryResult:
        if not to:
            return DeliveryResult(sent=False, skipped=True)
        self.sent.append((to, subject, text))
        self._logger.info("Mock email", extra={"reason": subject})
        return DeliveryResult(sent=True, reference=f"mock_email_{len(self.sent)}")


class MockSmsSender(SmsSenderPort):
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    def send_sms(self, to: str | None, text: str) -> DeliveryResult:
        if not to:
            return DeliveryResult(sent=False, skipped=True)
        self.sent.append((to, text))
        self._logger.info("Mock SMS", extra={"reason": f"len={len(text)}"})
        return DeliveryResult(sent=True, reference=f"mock_sms_{len(self.sent)}")
