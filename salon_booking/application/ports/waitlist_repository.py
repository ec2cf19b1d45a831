from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.waitlist import NewWaitlistEntry, WaitlistEntry


class WaitlistRepositoryPort(ABC):
    @abstractmethod
    def list_entries(self, user_id: str | None = None) -> list[WaitlistEntry]:
        raise NotImplementedError

    @abstractmethod
    def get_entry(self, entry_id: str) -> WaitlistEntry | None:
        raise NotImplementedError

    @abstractmethod
    def create_entry(self, entry: NewWaitlistEntry, user_id: str | None) -> WaitlistEntry:
        raise NotImplementedError

    @abstractmethod
    def remove_entry(self, entry_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_entries(self, user_id: str) -> None:
        raise NotImplementedError
