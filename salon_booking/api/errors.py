from __future__ import annotations

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from salon_booking.application.exceptions import (
    AuthenticationError,
    BackendError,
    BackendNotConfiguredError,
    InvalidStatusTransitionError,
    NotificationDeliveryError,
    PaymentConflictError,
    PaymentNotConfiguredError,
    PaymentProviderError,
    SlotUnavailableError,
)

# everything a route translates into a status code; anything else is a bug and stays a 500
DOMAIN_ERRORS = (
    ValueError,
    LookupError,
    PermissionError,
    SlotUnavailableError,
    PaymentConflictError,
    PaymentNotConfiguredError,
    PaymentProviderError,
    NotificationDeliveryError,
    BackendError,
)


def status_for(error: Exception) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, PermissionError):
        return 403
    if isinstance(error, LookupError):
        return 404
    if isinstance(error, (SlotUnavailableError, InvalidStatusTransitionError, PaymentConflictError)):
        return 409
    if isinstance(error, ValueError):
        return 400
    if isinstance(error, (BackendNotConfiguredError, PaymentNotConfiguredError)):
        return 503
    if isinstance(error, PaymentProviderError) and error.status_code and 400 <= error.status_code < 500:
        return error.status_code
    if isinstance(error, (PaymentProviderError, NotificationDeliveryError, BackendError)):
        return 502
    return 500


def http_error(error: Exception) -> HTTPException:
    return HTTPException(status_code=status_for(error), detail=str(error))


def message_response(error: Exception) -> JSONResponse:
    """Payment and notification routes answer with {"message": ...} instead of {"detail": ...}."""
    return JSONResponse(status_code=status_for(error), content={"message": str(error)})
