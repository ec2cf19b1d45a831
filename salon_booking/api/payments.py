from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from salon_booking.api.auth import get_optional_user
from salon_booking.api.errors import DOMAIN_ERRORS, message_response
from salon_booking.api.v1.schemas import CheckoutRequestSchema, NotificationRequestSchema
from salon_booking.application.use_cases.notifications import SendBookingNotificationUseCase
from salon_booking.application.use_cases.payments import (
    CreateCheckoutSessionUseCase,
    VerifyCheckoutSessionUseCase,
)
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.wiring.dependencies import (
    get_create_checkout_use_case,
    get_send_notification_use_case,
    get_verify_checkout_use_case,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _request_origin(request: Request) -> str:
    origin = request.headers.get("origin")
    if origin:
        return origin.rstrip("/")
    return str(request.base_url).rstrip("/")


@router.post("/api/create-checkout-session")
def create_checkout_session(
    request: Request,
    req: CheckoutRequestSchema | None = None,
    user: AuthUser | None = Depends(get_optional_user),
    uc: CreateCheckoutSessionUseCase = Depends(get_create_checkout_use_case),
) -> JSONResponse:
    req = req or CheckoutRequestSchema()
    try:
        result = uc.execute(
            booking_id=req.bookingId,
            user=user,
            success_url=req.successUrl,
            cancel_url=req.cancelUrl,
            request_origin=_request_origin(request),
        )
    except DOMAIN_ERRORS as e:
        logger.warning("Checkout session not created", extra={"booking_id": req.bookingId, "reason": str(e)})
        return message_response(e)
    return JSONResponse({"id": result.id, "url": result.url, "bookingId": result.booking_id})


@router.get("/api/verify-checkout-session")
def verify_checkout_session(
    session_id: str | None = Query(None),
    user: AuthUser | None = Depends(get_optional_user),
    uc: VerifyCheckoutSessionUseCase = Depends(get_verify_checkout_use_case),
) -> JSONResponse:
    try:
        verified = uc.execute(session_id, user)
    except DOMAIN_ERRORS as e:
        logger.warning("Checkout session not verified", extra={"session_id": session_id, "reason": str(e)})
        return message_response(e)
    return JSONResponse(verified.to_payload())


@router.post("/api/send-booking-notification")
def send_booking_notification(
    req: NotificationRequestSchema | None = None,
    user: AuthUser | None = Depends(get_optional_user),
    uc: SendBookingNotificationUseCase = Depends(get_send_notification_use_case),
) -> JSONResponse:
    req = req or NotificationRequestSchema()
    try:
        result = uc.execute(req.eventType, req.booking.id, user)
    except DOMAIN_ERRORS as e:
        logger.warning(
            "Booking notification not sent",
            extra={"booking_id": req.booking.id, "event": req.eventType, "reason": str(e)},
        )
        return message_response(e)
    return JSONResponse({"ok": True, "email": result.email.to_payload(), "sms": result.sms.to_payload()})
