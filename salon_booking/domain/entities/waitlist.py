from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WaitlistEntry:
    id: str
    service_id: str
    service_name: str
    email: str
    phone: str
    note: str = ""
    user_id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class NewWaitlistEntry:
    service_id: str
    service_name: str
    email: str
    phone: str
    note: str = ""
