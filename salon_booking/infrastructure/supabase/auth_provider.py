from __future__ import annotations

import logging
from typing import Any

from salon_booking.application.exceptions import AuthenticationError, BackendError
from salon_booking.application.ports.auth_provider import AuthProviderPort
from salon_booking.domain.entities.profile import AuthSession, AuthUser
from salon_booking.infrastructure.supabase.rest_client import SupabaseClient


def _error_message(payload: Any, status_code: int) -> str:
    if isinstance(payload, dict):
        for key in ("error_description", "msg", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return f"Auth error ({status_code})"


class SupabaseAuthProvider(AuthProviderPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def get_user(self, access_token: str) -> AuthUser | None:
        resp = self._client.auth("GET", "/user", access_token=access_token)
        if resp.status_code >= 400:
            return None
        try:
            data = resp.json()
        except ValueError:
            return None
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return AuthUser(id=str(data["id"]), email=data.get("email"), access_token=access_token)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        resp = self._client.auth(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        data = self._json(resp)
        if resp.status_code >= 400:
            raise AuthenticationError(_error_message(data, resp.status_code))
        user = data.get("user") or {}
        token = data.get("access_token")
        if not token or not user.get("id"):
            raise BackendError("Auth response without session")
        return AuthSession(
            access_token=token,
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            user=AuthUser(id=str(user["id"]), email=user.get("email"), access_token=token),
        )

    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> AuthUser | None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        resp = self._client.auth("POST", "/signup", params=params, json={"email": email, "password": password})
        data = self._json(resp)
        if resp.status_code >= 400:
            raise ValueError(_error_message(data, resp.status_code))
        user = data.get("user") or data
        if isinstance(user, dict) and user.get("id"):
            return AuthUser(id=str(user["id"]), email=user.get("email"))
        return None

    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        resp = self._client.auth("POST", "/recover", params=params, json={"email": email})
        if resp.status_code >= 400:
            raise ValueError(_error_message(self._json(resp), resp.status_code))

    def sign_out(self, access_token: str) -> None:
        resp = self._client.auth("POST", "/logout", access_token=access_token)
        if resp.status_code >= 400 and resp.status_code != 401:
            raise BackendError(_error_message(self._json(resp), resp.status_code), status_code=resp.status_code)

    @staticmethod
    def _json(resp) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
