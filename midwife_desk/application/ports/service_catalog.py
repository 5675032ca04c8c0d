from __future__ import annotations

from abc import ABC, abstractmethod

from midwife_desk.domain.entities.service_catalog import ServiceCatalogEntry


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, code: str) -> ServiceCatalogEntry | None:
        """Get service catalog entry by service code."""
        raise NotImplementedError

    @abstractmethod
    def get_duration_minutes(self, code: str) -> int:
        """Get service duration in minutes. Unknown codes get the default duration."""
        raise NotImplementedError

    @abstractmethod
    def bookable_codes(self) -> list[str]:
        """Service codes a midwife may create appointments for."""
        raise NotImplementedError
