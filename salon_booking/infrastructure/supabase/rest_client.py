from __future__ import annotations

import logging
from typing import Any

import httpx

from salon_booking.application.exceptions import (
    BackendError,
    BackendNotConfiguredError,
    MissingRpcError,
)

_MISSING_RPC_CODES = {"PGRST202", "42883"}


def is_missing_rpc(message: str | None, code: str | None = None) -> bool:
    if code in _MISSING_RPC_CODES:
        return True
    lowered = (message or "").lower()
    return "could not find the function" in lowered or "does not exist" in lowered


def eq(value: str) -> str:
    return f"eq.{value}"


class SupabaseClient:
    """Thin PostgREST / GoTrue client. Service-role key by default, user tokens where a call must run as the user."""

    def __init__(
        self,
        url: str | None,
        service_key: str | None,
        anon_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not url or not service_key:
            raise BackendNotConfiguredError(
                "Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY missing)."
            )
        self._url = url.rstrip("/")
        self._service_key = service_key
        self._anon_key = anon_key or service_key
        self._client = httpx.Client(base_url=self._url, timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    def _headers(self, access_token: str | None) -> dict[str, str]:
        if access_token:
            return {
                "apikey": self._anon_key,
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        return {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        access_token: str | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        headers = self._headers(access_token)
        if extra_headers:
            headers.update(extra_headers)
        try:
            resp = self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Supabase request failed", extra={"path": path, "error": str(e)})
            raise BackendError(f"Supabase is unreachable: {e}") from e

        try:
            body = resp.json() if resp.content else None
        except ValueError:
            body = None

        if resp.status_code >= 400:
            message, code = _error_details(body, resp.status_code)
            self._logger.warning(
                "Supabase error",
                extra={"path": path, "status": resp.status_code, "code": code, "reason": message},
            )
            if is_missing_rpc(message, code) and "/rpc/" in path:
                raise MissingRpcError(message, status_code=resp.status_code, code=code)
            raise BackendError(message, status_code=resp.status_code, code=code)
        return body

    def select(
        self,
        table: str,
        filters: dict[str, str] | None = None,
        *,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"select": columns}
        params.update(filters or {})
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        data = self.request("GET", f"/rest/v1/{table}", params=params)
        return data if isinstance(data, list) else []

    def insert(self, table: str, row: dict[str, Any], *, access_token: str | None = None) -> dict[str, Any] | None:
        data = self.request("POST", f"/rest/v1/{table}", json=row, access_token=access_token)
        return first_row(data)

    def upsert(self, table: str, row: dict[str, Any]) -> dict[str, Any] | None:
        data = self.request(
            "POST",
            f"/rest/v1/{table}",
            json=row,
            extra_headers={"Prefer": "return=representation,resolution=merge-duplicates"},
        )
        return first_row(data)

    def update(
        self,
        table: str,
        filters: dict[str, str],
        patch: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any] | None:
        data = self.request("PATCH", f"/rest/v1/{table}", params=filters, json=patch, access_token=access_token)
        return first_row(data)

    def delete(self, table: str, filters: dict[str, str]) -> None:
        self.request("DELETE", f"/rest/v1/{table}", params=filters)

    def rpc(self, name: str, params: dict[str, Any], *, access_token: str | None = None) -> Any:
        return self.request("POST", f"/rest/v1/rpc/{name}", json=params, access_token=access_token)

    def auth(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        access_token: str | None = None,
    ) -> httpx.Response:
        """GoTrue calls return the raw response; callers decide what an error means."""
        headers = {"apikey": self._anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        try:
            return self._client.request(method, f"/auth/v1{path}", json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Supabase auth request failed", extra={"path": path, "error": str(e)})
            raise BackendError(f"Supabase auth is unreachable: {e}") from e


def first_row(data: Any) -> dict[str, Any] | None:
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


def _error_details(body: Any, status_code: int) -> tuple[str, str | None]:
    if isinstance(body, dict):
        message = body.get("message") or body.get("msg") or body.get("hint") or body.get("error_description")
        code = body.get("code")
        return str(message or f"Supabase error ({status_code})"), (str(code) if code is not None else None)
    return f"Supabase error ({status_code})", None
