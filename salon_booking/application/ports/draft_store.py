from abc import ABC, abstractmethod

from salon_booking.domain.entities.booking_draft import BookingDraft


class DraftStorePort(ABC):
    @abstractmethod
    def new_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_draft(self, draft_id: str) -> BookingDraft | None:
        raise NotImplementedError

    @abstractmethod
    def save_draft(self, draft: BookingDraft) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_draft(self, draft_id: str) -> None:
        raise NotImplementedError
