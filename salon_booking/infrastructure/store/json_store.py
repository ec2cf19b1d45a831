from __future__ import annotations

import json
import re
import threading
import uuid
from pathlib import Path
from typing import Any

from salon_booking.application.ports.draft_store import DraftStorePort
from salon_booking.domain.entities.booking import Customer
from salon_booking.domain.entities.booking_draft import BookingDraft, WizardStep

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class JsonDraftStore(DraftStorePort):
    def __init__(self, data_dir: str = "./data/drafts") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _get_lock(self, draft_id: str) -> threading.Lock:
        """Get or create a lock for a draft_id."""
        with self._lock_lock:
            if draft_id not in self._locks:
                self._locks[draft_id] = threading.Lock()
            return self._locks[draft_id]

    def _get_file_path(self, draft_id: str) -> Path:
        if not _SAFE_ID.match(draft_id):
            raise ValueError(f"Invalid draft id '{draft_id}'")
        return self._data_dir / f"{draft_id}.json"

    def get_draft(self, draft_id: str) -> BookingDraft | None:
        try:
            file_path = self._get_file_path(draft_id)
        except ValueError:
            return None
        if not file_path.exists():
            return None

        with self._get_lock(draft_id):
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError):
                # corrupted files read as a missing draft
                return None
        return self._deserialize_draft(data, draft_id)

    def save_draft(self, draft: BookingDraft) -> None:
        """Save draft to JSON file atomically."""
        file_path = self._get_file_path(draft.id)
        temp_path = file_path.with_suffix(".json.tmp")

        with self._get_lock(draft.id):
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(self._serialize_draft(draft), f, indent=2, ensure_ascii=False)
                temp_path.replace(file_path)
            except Exception:
                if temp_path.exists():
                    temp_path.unlink()
                raise

    def delete_draft(self, draft_id: str) -> None:
        file_path = self._get_file_path(draft_id)
        with self._get_lock(draft_id):
            file_path.unlink(missing_ok=True)

    def _serialize_draft(self, draft: BookingDraft) -> dict[str, Any]:
        return {
            "id": draft.id,
            "step": draft.step.value,
            "service_id": draft.service_id,
            "stylist_id": draft.stylist_id,
            "date_iso": draft.date_iso,
            "time": draft.time,
            "customer": draft.customer.to_payload() if draft.customer else None,
            "last_booking_id": draft.last_booking_id,
            "updated_at": draft.updated_at,
            "version": 1,
        }

    def _deserialize_draft(self, data: dict[str, Any], draft_id: str) -> BookingDraft:
        customer_data = data.get("customer")
        customer = None
        if isinstance(customer_data, dict):
            customer = Customer(
                first_name=customer_data.get("firstName", ""),
                last_name=customer_data.get("lastName", ""),
                email=customer_data.get("email", ""),
                phone=customer_data.get("phone", ""),
                address=customer_data.get("address", ""),
                notes=customer_data.get("notes", ""),
            )

        try:
            step = WizardStep(data.get("step", WizardStep.service.value))
        except ValueError:
            step = WizardStep.service

        return BookingDraft(
            id=draft_id,
            step=step,
            service_id=data.get("service_id"),
            stylist_id=data.get("stylist_id") or "auto",
            date_iso=data.get("date_iso"),
            time=data.get("time"),
            customer=customer,
            last_booking_id=data.get("last_booking_id"),
            updated_at=data.get("updated_at"),
        )
