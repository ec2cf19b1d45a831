from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.service_catalog import Service
from salon_booking.domain.entities.stylist import Stylist


class ServiceCatalogPort(ABC):
    @abstractmethod
    def list_services(self, tag: str | None = None) -> list[Service]:
        """List services, optionally only those carrying a tag."""
        raise NotImplementedError

    @abstractmethod
    def get_service(self, service_id: str) -> Service | None:
        raise NotImplementedError

    @abstractmethod
    def list_stylists(self) -> list[Stylist]:
        raise NotImplementedError

    @abstractmethod
    def get_stylist(self, stylist_id: str) -> Stylist | None:
        raise NotImplementedError
