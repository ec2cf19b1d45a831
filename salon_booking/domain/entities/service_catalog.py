from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    category: str
    price_from: int
    duration_min: int
    deposit: int
    description: str = ""
    tags: tuple[str, ...] = ()
