from abc import ABC, abstractmethod

from salon_booking.domain.entities.notification import DeliveryResult


class EmailSenderPort(ABC):
    @abstractmethod
    def send_email(self, to: str | None, subject: str, text: str) -> DeliveryResult:
        raise NotImplementedError


class SmsSenderPort(ABC):
    @abstractmethod
    def send_sms(self, to: str | None, text: str) -> DeliveryResult:
        raise NotImplementedError
