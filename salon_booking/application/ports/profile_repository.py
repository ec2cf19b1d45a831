from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile


class ProfileRepositoryPort(ABC):
    @abstractmethod
    def get_role(self, user_id: str) -> Role:
        """Missing profile or role means customer."""
        raise NotImplementedError

    @abstractmethod
    def get_profile(self, user: AuthUser) -> UserProfile:
        raise NotImplementedError

    @abstractmethod
    def save_profile(self, profile: UserProfile) -> UserProfile:
        raise NotImplementedError

    @abstractmethod
    def set_role_by_email(self, email: str, role: Role, actor: AuthUser) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_users_with_roles(self, limit: int, actor: AuthUser) -> list[UserProfile]:
        raise NotImplementedError
