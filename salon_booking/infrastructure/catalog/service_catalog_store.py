from __future__ import annotations

from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.domain.entities.service_catalog import Service
from salon_booking.domain.entities.stylist import Stylist
from salon_booking.infrastructure.catalog.service_catalog_data import SERVICES, STYLISTS


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(
        self,
        services: tuple[Service, ...] | None = None,
        stylists: tuple[Stylist, ...] | None = None,
    ) -> None:
        self._services = {s.id: s for s in (services or SERVICES)}
        self._stylists = {s.id: s for s in (stylists or STYLISTS)}

    def list_services(self, tag: str | None = None) -> list[Service]:
        if not tag or tag == "all":
            return list(self._services.values())
        normalized = tag.lower().strip()
        return [s for s in self._services.values() if normalized in s.tags]

    def get_service(self, service_id: str) -> Service | None:
        normalized_key = (service_id or "").lower().strip()
        return self._services.get(normalized_key)

    def list_stylists(self) -> list[Stylist]:
        return list(self._stylists.values())

    def get_stylist(self, stylist_id: str) -> Stylist | None:
        return self._stylists.get((stylist_id or "").strip())
