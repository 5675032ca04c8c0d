from __future__ import annotations

from midwife_desk.application.ports.service_catalog import ServiceCatalogPort
from midwife_desk.core.config import settings
from midwife_desk.domain.entities.service_catalog import ServiceCatalogEntry

SERVICE_CATALOG: tuple[ServiceCatalogEntry, ...] = (
    ServiceCatalogEntry("A1/A2", "Erstberatung", 60),
    ServiceCatalogEntry("B1", "Schwangerenvorsorge", 60, bookable=True),
    ServiceCatalogEntry("B2", "Hilfeleistung bei Beschwerden", 50, bookable=True),
    ServiceCatalogEntry("C1", "Geburtsvorbereitung", 60, bookable=True),
    ServiceCatalogEntry("C2", "Stillberatung", 25, bookable=True),
    ServiceCatalogEntry("D1", "Wochenbettbetreuung", 60, bookable=True),
    ServiceCatalogEntry("D2", "Rückbildung", 25, bookable=True),
    ServiceCatalogEntry("E1", "Akupunktur", 140),
    ServiceCatalogEntry("F1", "Weitere Leistungen", 75),
)


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(
        self,
        entries: tuple[ServiceCatalogEntry, ...] = SERVICE_CATALOG,
        default_duration: int | None = None,
    ) -> None:
        self._entries = {entry.code: entry for entry in entries}
        self._default_duration = default_duration or settings.DEFAULT_SERVICE_DURATION_MINUTES

    def get_service(self, code: str) -> ServiceCatalogEntry | None:
        return self._entries.get(code)

    def get_duration_minutes(self, code: str) -> int:
        entry = self._entries.get(code)
        if entry is None:
            return self._default_duration
        return entry.duration_minutes

    def bookable_codes(self) -> list[str]:
        return [code for code, entry in self._entries.items() if entry.bookable]
