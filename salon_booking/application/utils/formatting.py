from __future__ import annotations

from datetime import date

_WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def format_minutes(minutes: int | None) -> str:
    if not minutes:
        return ""
    hours, rest = divmod(int(minutes), 60)
    if hours and rest:
        return f"{hours} h {rest} min"
    if hours:
        return f"{hours} h"
    return f"{rest} min"


def format_currency(amount: float | int | None) -> str:
    """German style amounts: 1.234,50 €"""
    value = f"{float(amount or 0):,.2f}"
    value = value.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{value} €"


def format_date_label(date_iso: str | None) -> str:
    if not date_iso:
        return ""
    try:
        day = date.fromisoformat(date_iso)
    except ValueError:
        return date_iso
    return f"{_WEEKDAY_LABELS[day.weekday()]}, {day.strftime('%d.%m.%Y')}"


def to_cents(amount: float | int | None) -> int:
    return max(0, round(float(amount or 0) * 100))
