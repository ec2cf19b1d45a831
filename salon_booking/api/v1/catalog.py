from fastapi import APIRouter, Depends, HTTPException, Query

from salon_booking.api.errors import DOMAIN_ERRORS, http_error
from salon_booking.api.v1.schemas import (
    DayScheduleSchema,
    ServiceSchema,
    SlotCheckRequestSchema,
    SlotCheckResponseSchema,
    StylistSchema,
)
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.availability import AvailabilityUseCase
from salon_booking.domain.entities.availability import SlotQuery
from salon_booking.wiring.dependencies import get_availability_use_case, get_service_catalog

router = APIRouter()


def _require_stylist(catalog: ServiceCatalogPort, stylist_id: str) -> None:
    if catalog.get_stylist(stylist_id) is None:
        raise HTTPException(status_code=400, detail=f"Unknown stylist '{stylist_id}'")


@router.get("/services", response_model=list[ServiceSchema])
def list_services(
    tag: str | None = Query(None),
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
):
    return [ServiceSchema.from_entity(s) for s in catalog.list_services(tag)]


@router.get("/services/{service_id}", response_model=ServiceSchema)
def get_service(service_id: str, catalog: ServiceCatalogPort = Depends(get_service_catalog)):
    service = catalog.get_service(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")
    return ServiceSchema.from_entity(service)


@router.get("/stylists", response_model=list[StylistSchema])
def list_stylists(catalog: ServiceCatalogPort = Depends(get_service_catalog)):
    return [StylistSchema(id=s.id, name=s.name, focus=s.focus, role=s.role) for s in catalog.list_stylists()]


@router.get("/availability", response_model=DayScheduleSchema)
def day_availability(
    date_iso: str = Query(..., alias="date"),
    service_id: str = Query(...),
    stylist_id: str = Query("auto"),
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
    uc: AvailabilityUseCase = Depends(get_availability_use_case),
):
    service = catalog.get_service(service_id)
    if service is None:
        raise HTTPException(status_code=400, detail=f"Unknown service '{service_id}'")
    _require_stylist(catalog, stylist_id)
    try:
        schedule = uc.list_day(date_iso, service.duration_min, stylist_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return DayScheduleSchema.from_entity(schedule)


@router.post("/availability/check", response_model=SlotCheckResponseSchema)
def check_slot(
    req: SlotCheckRequestSchema,
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
    uc: AvailabilityUseCase = Depends(get_availability_use_case),
):
    _require_stylist(catalog, req.stylist_id)
    try:
        result = uc.check_slot(
            SlotQuery(
                date_iso=req.date_iso,
                time=req.time,
                duration_min=req.duration_min,
                stylist_id=req.stylist_id,
                exclude_booking_id=req.exclude_booking_id,
            )
        )
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return SlotCheckResponseSchema(available=result.available, source=result.source)
