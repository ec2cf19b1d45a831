import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salon_booking.api.errors import status_for
from salon_booking.api.payments import router as payments_router
from salon_booking.api.v1.auth import router as auth_router
from salon_booking.api.v1.booking import router as booking_router
from salon_booking.api.v1.catalog import router as catalog_router
from salon_booking.api.v1.dashboard import router as dashboard_router
from salon_booking.api.webhooks import router as webhooks_router
from salon_booking.application.exceptions import BackendError
from salon_booking.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "session_id", "user_id", "event", "status", "source", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Salon Booking", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.ALLOWED_ORIGIN.split(",") if o.strip()] or ["*"],
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Stripe-Signature"],
)


@app.exception_handler(BackendError)
def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    # raised while resolving dependencies, before a route can map it
    logging.getLogger(__name__).error("Backend error", extra={"reason": str(exc)})
    return JSONResponse(status_code=status_for(exc), content={"detail": str(exc)})


app.include_router(catalog_router, prefix="/api/v1", tags=["catalog"])
app.include_router(booking_router, prefix="/api/v1/booking", tags=["booking"])
app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])
app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(payments_router, tags=["payments"])
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
