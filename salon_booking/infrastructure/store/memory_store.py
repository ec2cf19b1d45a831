from __future__ import annotations

import threading
import uuid

from salon_booking.application.ports.draft_store import DraftStorePort
from salon_booking.domain.entities.booking_draft import BookingDraft


class MemoryDraftStore(DraftStorePort):
    def __init__(self, max_drafts: int = 1000) -> None:
        self._drafts: dict[str, BookingDraft] = {}
        self._max_drafts = max_drafts
        self._lock = threading.Lock()

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def get_draft(self, draft_id: str) -> BookingDraft | None:
        return self._drafts.get(draft_id)

    def save_draft(self, draft: BookingDraft) -> None:
        with self._lock:
            self._drafts.pop(draft.id, None)
            self._drafts[draft.id] = draft
            # oldest drafts go first
            while len(self._drafts) > self._max_drafts:
                self._drafts.pop(next(iter(self._drafts)))

    def delete_draft(self, draft_id: str) -> None:
        with self._lock:
            self._drafts.pop(draft_id, None)
