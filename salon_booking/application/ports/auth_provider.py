from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.profile import AuthSession, AuthUser


class AuthProviderPort(ABC):
    @abstractmethod
    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a bearer token. Returns None for unknown or expired tokens."""
        raise NotImplementedError

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        raise NotImplementedError

    @abstractmethod
    def sign_up(self, email: str, password: str, redirect_to: str | None = None) -> AuthUser | None:
        raise NotImplementedError

    @abstractmethod
    def send_password_reset(self, email: str, redirect_to: str | None = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def sign_out(self, access_token: str) -> None:
        raise NotImplementedError
