from fastapi import APIRouter, Depends, Query, Response

from salon_booking.api.auth import require_user
from salon_booking.api.errors import DOMAIN_ERRORS, http_error
from salon_booking.api.v1.schemas import (
    BookingSchema,
    IdentitySchema,
    KpiSchema,
    ProfileSchema,
    ProfileUpdateSchema,
    RoleUpdateSchema,
    StatusUpdateSchema,
    WaitlistEntrySchema,
)
from salon_booking.application.use_cases.dashboard import USER_LIST_LIMIT, DashboardUseCase, deposit_action_label
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.wiring.dependencies import get_dashboard_use_case

router = APIRouter()


@router.get("/me", response_model=IdentitySchema)
def identity(user: AuthUser = Depends(require_user), uc: DashboardUseCase = Depends(get_dashboard_use_case)):
    return IdentitySchema(user_id=user.id, email=user.email, role=uc.role_of(user).value)


@router.get("/bookings", response_model=list[BookingSchema])
def list_bookings(
    status: str = Query("all"),
    q: str = Query(""),
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
):
    role = uc.role_of(user)
    return [BookingSchema.from_entity(b, deposit_action_label(b, role)) for b in uc.list_bookings(user, status, q)]


@router.get("/bookings/export.csv")
def export_csv(
    status: str = Query("all"),
    q: str = Query(""),
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
) -> Response:
    return Response(
        content=uc.export_csv(user, status, q),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="bookings.csv"'},
    )


@router.patch("/bookings/{booking_id}/status", response_model=BookingSchema)
def update_status(
    booking_id: str,
    req: StatusUpdateSchema,
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
):
    try:
        booking = uc.update_status(user, booking_id, req.status)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return BookingSchema.from_entity(booking, uc.deposit_action(user, booking))


@router.get("/kpis", response_model=KpiSchema)
def kpis(user: AuthUser = Depends(require_user), uc: DashboardUseCase = Depends(get_dashboard_use_case)):
    k = uc.kpis(user)
    return KpiSchema(bookings=k.bookings, waitlist=k.waitlist, open_payments=k.open_payments)


@router.get("/waitlist", response_model=list[WaitlistEntrySchema])
def list_waitlist(user: AuthUser = Depends(require_user), uc: DashboardUseCase = Depends(get_dashboard_use_case)):
    return [WaitlistEntrySchema.from_entity(e) for e in uc.list_waitlist(user)]


@router.delete("/waitlist/{entry_id}", status_code=204)
def remove_waitlist_entry(
    entry_id: str,
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
) -> Response:
    try:
        uc.remove_waitlist_entry(user, entry_id)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


@router.delete("/data", status_code=204)
def clear_own_data(user: AuthUser = Depends(require_user), uc: DashboardUseCase = Depends(get_dashboard_use_case)) -> Response:
    uc.clear_own_data(user)
    return Response(status_code=204)


@router.get("/profile", response_model=ProfileSchema)
def get_profile(user: AuthUser = Depends(require_user), uc: DashboardUseCase = Depends(get_dashboard_use_case)):
    return ProfileSchema.from_entity(uc.get_profile(user))


@router.put("/profile", response_model=ProfileSchema)
def save_profile(
    req: ProfileUpdateSchema,
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
):
    profile = uc.save_profile(
        user,
        full_name=req.full_name,
        phone=req.phone,
        address=req.address,
        avatar_url=req.avatar_url,
    )
    return ProfileSchema.from_entity(profile)


@router.get("/users", response_model=list[ProfileSchema])
def list_users(
    limit: int = Query(USER_LIST_LIMIT, ge=1),
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
):
    try:
        return [ProfileSchema.from_entity(p) for p in uc.list_users(user, limit)]
    except DOMAIN_ERRORS as e:
        raise http_error(e)


@router.put("/users/role", status_code=204)
def set_role(
    req: RoleUpdateSchema,
    user: AuthUser = Depends(require_user),
    uc: DashboardUseCase = Depends(get_dashboard_use_case),
) -> Response:
    try:
        uc.set_role(user, req.email, req.role)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)
