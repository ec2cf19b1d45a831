from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from salon_booking.api.auth import get_optional_user, require_user
from salon_booking.api.errors import DOMAIN_ERRORS, http_error
from salon_booking.api.v1.schemas import (
    BookingSchema,
    CustomerSchema,
    DayScheduleSchema,
    DraftSchema,
    SelectDateSchema,
    SelectServiceSchema,
    SelectStylistSchema,
    SelectTimeSchema,
    StartDraftSchema,
    SummarySchema,
    WaitlistEntrySchema,
    WaitlistRequestSchema,
)
from salon_booking.application.use_cases.booking_wizard import BookingWizardUseCase
from salon_booking.application.use_cases.dashboard import DashboardUseCase
from salon_booking.core.config import settings
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.wiring.dependencies import get_booking_wizard_use_case, get_dashboard_use_case

router = APIRouter()
logger = logging.getLogger(__name__)

GUEST_USER = AuthUser(id="guest")


def _booking_user(user: AuthUser | None) -> AuthUser:
    if user is not None:
        return user
    if settings.is_local and not settings.supabase_configured:
        return GUEST_USER
    raise HTTPException(status_code=401, detail="Please sign in to book.")


@router.post("/drafts", response_model=DraftSchema, status_code=201)
def start_draft(
    req: StartDraftSchema | None = None,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    draft = uc.start(req.service_id if req else None)
    return DraftSchema.from_entity(draft)


@router.get("/drafts/{draft_id}", response_model=DraftSchema)
def get_draft(draft_id: str, uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case)):
    try:
        return DraftSchema.from_entity(uc.get(draft_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/drafts/{draft_id}/service", response_model=DraftSchema)
def select_service(
    draft_id: str,
    req: SelectServiceSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        return DraftSchema.from_entity(uc.select_service(draft_id, req.service_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/drafts/{draft_id}/stylist", response_model=DraftSchema)
def select_stylist(
    draft_id: str,
    req: SelectStylistSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        return DraftSchema.from_entity(uc.select_stylist(draft_id, req.stylist_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/drafts/{draft_id}/date", response_model=DraftSchema)
def select_date(
    draft_id: str,
    req: SelectDateSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        return DraftSchema.from_entity(uc.select_date(draft_id, req.date_iso))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.delete("/drafts/{draft_id}/date", response_model=DraftSchema)
def reset_date(draft_id: str, uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case)):
    try:
        return DraftSchema.from_entity(uc.reset_date(draft_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/drafts/{draft_id}/slots", response_model=DayScheduleSchema)
def list_slots(draft_id: str, uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case)):
    try:
        return DayScheduleSchema.from_entity(uc.list_slots(draft_id))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/drafts/{draft_id}/time", response_model=DraftSchema)
def select_time(
    draft_id: str,
    req: SelectTimeSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        return DraftSchema.from_entity(uc.select_time(draft_id, req.time))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/drafts/{draft_id}/details", response_model=DraftSchema)
def submit_details(
    draft_id: str,
    req: CustomerSchema,
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        return DraftSchema.from_entity(uc.submit_details(draft_id, req.to_entity()))
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.get("/drafts/{draft_id}/summary", response_model=SummarySchema)
def summary(draft_id: str, uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case)):
    try:
        s = uc.summary(draft_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return SummarySchema(
        service_name=s.service_name,
        duration_label=s.duration_label,
        date_label=s.date_label,
        time=s.time,
        stylist_name=s.stylist_name,
        deposit_label=s.deposit_label,
        remainder_label=s.remainder_label,
        customer=CustomerSchema.from_entity(s.customer) if s.customer else None,
    )


@router.post("/drafts/{draft_id}/confirm", response_model=BookingSchema, status_code=201)
def confirm(
    draft_id: str,
    user: AuthUser | None = Depends(get_optional_user),
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        booking = uc.confirm(draft_id, _booking_user(user))
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return BookingSchema.from_entity(booking)


@router.post("/drafts/{draft_id}/waitlist", response_model=WaitlistEntrySchema, status_code=201)
def join_waitlist(
    draft_id: str,
    req: WaitlistRequestSchema,
    user: AuthUser | None = Depends(get_optional_user),
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
):
    try:
        entry = uc.join_waitlist(draft_id, req.email, req.phone, req.note, user=user)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return WaitlistEntrySchema.from_entity(entry)


@router.get("/bookings/{booking_id}/calendar.ics")
def calendar_file(
    booking_id: str,
    user: AuthUser = Depends(require_user),
    dashboard: DashboardUseCase = Depends(get_dashboard_use_case),
    uc: BookingWizardUseCase = Depends(get_booking_wizard_use_case),
) -> Response:
    try:
        booking = dashboard.get_booking(user, booking_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(
        content=uc.calendar_file(booking),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="booking-{booking.id}.ics"'},
    )
