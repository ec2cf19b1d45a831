from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from salon_booking.application.exceptions import BackendError
from salon_booking.application.dto.supabase_rows import WaitlistRow
from salon_booking.application.ports.waitlist_repository import WaitlistRepositoryPort
from salon_booking.domain.entities.waitlist import NewWaitlistEntry, WaitlistEntry
from salon_booking.infrastructure.supabase.rest_client import SupabaseClient, eq


def parse_entry(row: dict[str, Any] | None) -> WaitlistEntry | None:
    if row is None:
        return None
    try:
        return WaitlistRow.model_validate(row).to_entity()
    except ValidationError as e:
        raise BackendError(f"Malformed waitlist row: {e.errors()[0].get('msg')}") from e


class SupabaseWaitlistRepository(WaitlistRepositoryPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    def list_entries(self, user_id: str | None = None) -> list[WaitlistEntry]:
        filters = {"user_id": eq(user_id)} if user_id else {}
        rows = self._client.select("waitlist", filters, order="created_at.desc")
        return [e for e in (parse_entry(r) for r in rows) if e is not None]

    def get_entry(self, entry_id: str) -> WaitlistEntry | None:
        rows = self._client.select("waitlist", {"id": eq(entry_id)}, limit=1)
        return parse_entry(rows[0]) if rows else None

    def create_entry(self, entry: NewWaitlistEntry, user_id: str | None) -> WaitlistEntry:
        created = parse_entry(
            self._client.insert(
                "waitlist",
                {
                    "user_id": user_id,
                    "service_id": entry.service_id,
                    "service_name": entry.service_name,
                    "email": entry.email,
                    "phone": entry.phone,
                    "note": entry.note or "",
                },
            )
        )
        if created is None:
            raise BackendError("Backend returned no waitlist entry")
        return created

    def remove_entry(self, entry_id: str) -> None:
        self._client.delete("waitlist", {"id": eq(entry_id)})

    def clear_entries(self, user_id: str) -> None:
        self._client.delete("waitlist", {"user_id": eq(user_id)})
