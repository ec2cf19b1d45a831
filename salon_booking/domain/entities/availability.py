from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SlotQuery:
    date_iso: str
    time: str
    duration_min: int
    stylist_id: str = "auto"
    exclude_booking_id: str | None = None


@dataclass(frozen=True)
class SlotCheck:
    available: bool
    source: str  # "remote" | "local"


@dataclass(frozen=True)
class DaySlot:
    time: str
    available: bool


@dataclass(frozen=True)
class DaySchedule:
    date_iso: str
    duration_min: int
    open_start: str
    open_end: str
    slots: list[DaySlot]
    source: str
