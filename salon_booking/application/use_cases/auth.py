from __future__ import annotations

import logging
from dataclasses import dataclass

from salon_booking.application.exceptions import AuthenticationError, BackendError
from salon_booking.application.ports.auth_provider import AuthProviderPort
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.application.utils.auth_errors import map_auth_error
from salon_booking.domain.entities.profile import AuthSession, AuthUser, Role


@dataclass(frozen=True)
class ProfileMenuState:
    signed_in: bool
    email: str | None
    role_label: str


def role_label(role: Role | None) -> str:
    if role == Role.admin:
        return "admin"
    if role == Role.staff:
        return "staff"
    return "guest/customer"


class AuthUseCase:
    def __init__(self, provider: AuthProviderPort, profiles: ProfileRepositoryPort) -> None:
        self._provider = provider
        self._profiles = profiles
        self._logger = logging.getLogger(__name__)

    def current_user(self, access_token: str | None) -> AuthUser | None:
        if not access_token:
            return None
        return self._provider.get_user(access_token)

    def sign_in(self, email: str, password: str) -> AuthSession:
        email, password = _require_credentials(email, password)
        try:
            session = self._provider.sign_in_with_password(email, password)
        except AuthenticationError as e:
            raise AuthenticationError(map_auth_error(str(e))) from e
        except BackendError as e:
            raise BackendError(map_auth_error(str(e)), status_code=e.status_code) from e
        self._logger.info("Signed in", extra={"user_id": session.user.id})
        return session

    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> AuthUser | None:
        email, password = _require_credentials(email, password)
        try:
            return self._provider.sign_up(email, password, redirect_to=redirect_to)
        except ValueError as e:
            raise ValueError(map_auth_error(str(e))) from e

    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        if not (email or "").strip():
            raise ValueError("Please enter your email address.")
        try:
            self._provider.send_password_reset(email.strip(), redirect_to=redirect_to)
        except ValueError as e:
            raise ValueError(map_auth_error(str(e))) from e

    def sign_out(self, access_token: str | None) -> None:
        if access_token:
            self._provider.sign_out(access_token)

    def profile_menu(self, access_token: str | None) -> ProfileMenuState:
        user = self.current_user(access_token)
        if user is None:
            return ProfileMenuState(signed_in=False, email=None, role_label=role_label(None))
        return ProfileMenuState(
            signed_in=True,
            email=user.email,
            role_label=role_label(self._profiles.get_role(user.id)),
        )


def _require_credentials(email: str, password: str) -> tuple[str, str]:
    email = (email or "").strip()
    if not email or not password:
        raise ValueError("Please enter email and password.")
    return email, password
