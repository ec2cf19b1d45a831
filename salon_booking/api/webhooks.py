from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from salon_booking.api.errors import DOMAIN_ERRORS, message_response
from salon_booking.application.use_cases.payments import HandlePaymentWebhookUseCase
from salon_booking.core.config import settings
from salon_booking.infrastructure.stripe.webhook_verify import verify_stripe_signature
from salon_booking.wiring.dependencies import get_payment_webhook_use_case


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/api/stripe-webhook")
async def stripe_webhook(
    request: Request,
    use_case: HandlePaymentWebhookUseCase = Depends(get_payment_webhook_use_case),
) -> JSONResponse:
    body = await request.body()
    signature = request.headers.get("Stripe-Signature")
    signature_valid = bool(body and settings.STRIPE_WEBHOOK_SECRET) and verify_stripe_signature(
        body,
        signature,
        settings.STRIPE_WEBHOOK_SECRET,
        tolerance_seconds=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
    )

    try:
        # the handler makes blocking Stripe and Supabase calls
        outcome = await run_in_threadpool(use_case.execute, body, signature_valid)
    except DOMAIN_ERRORS as e:
        logger.warning("Stripe webhook rejected", extra={"reason": str(e)})
        return message_response(e)

    logger.info("Stripe webhook processed", extra={"event": outcome.get("event"), "booking_id": outcome.get("bookingId")})
    return JSONResponse(outcome)
