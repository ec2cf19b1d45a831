from __future__ import annotations

from fastapi import Depends, Header, HTTPException

from salon_booking.application.use_cases.auth import AuthUseCase
from salon_booking.domain.entities.profile import AuthUser
from salon_booking.wiring.dependencies import get_auth_use_case


def get_bearer_token(authorization: str | None = Header(None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_optional_user(
    token: str | None = Depends(get_bearer_token),
    auth: AuthUseCase = Depends(get_auth_use_case),
) -> AuthUser | None:
    return auth.current_user(token)


def require_user(user: AuthUser | None = Depends(get_optional_user)) -> AuthUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in.")
    return user
