from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceCatalogEntry:
    code: str
    title: str
    duration_minutes: int
    bookable: bool = False  # midwife may create this appointment type from the desk
