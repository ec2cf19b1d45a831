from fastapi import APIRouter, Depends, Response

from salon_booking.api.auth import get_bearer_token
from salon_booking.api.errors import DOMAIN_ERRORS, http_error
from salon_booking.api.v1.schemas import (
    CredentialsSchema,
    PasswordResetSchema,
    ProfileMenuSchema,
    SessionSchema,
    SignUpResponseSchema,
)
from salon_booking.application.use_cases.auth import AuthUseCase
from salon_booking.application.utils.urls import safe_next_path
from salon_booking.wiring.dependencies import get_auth_use_case

router = APIRouter()


@router.post("/sign-in", response_model=SessionSchema)
def sign_in(req: CredentialsSchema, uc: AuthUseCase = Depends(get_auth_use_case)):
    try:
        session = uc.sign_in(req.email, req.password)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return SessionSchema(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        user_id=session.user.id,
        email=session.user.email,
        next=safe_next_path(req.next),
    )


@router.post("/sign-up", response_model=SignUpResponseSchema, status_code=201)
def sign_up(req: CredentialsSchema, uc: AuthUseCase = Depends(get_auth_use_case)):
    try:
        user = uc.sign_up(req.email, req.password, redirect_to=req.redirect_to)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    # GoTrue returns no user id while the email confirmation is pending
    return SignUpResponseSchema(user_id=user.id if user else None, confirmation_required=user is None)


@router.post("/password-reset", status_code=204)
def password_reset(req: PasswordResetSchema, uc: AuthUseCase = Depends(get_auth_use_case)) -> Response:
    try:
        uc.send_password_reset(req.email, redirect_to=req.redirect_to)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


@router.post("/sign-out", status_code=204)
def sign_out(
    token: str | None = Depends(get_bearer_token),
    uc: AuthUseCase = Depends(get_auth_use_case),
) -> Response:
    try:
        uc.sign_out(token)
    except DOMAIN_ERRORS as e:
        raise http_error(e)
    return Response(status_code=204)


@router.get("/menu", response_model=ProfileMenuSchema)
def profile_menu(
    token: str | None = Depends(get_bearer_token),
    uc: AuthUseCase = Depends(get_auth_use_case),
):
    state = uc.profile_menu(token)
    return ProfileMenuSchema(signed_in=state.signed_in, email=state.email, role_label=state.role_label)
