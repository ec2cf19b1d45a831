from __future__ import annotations

import logging

from pydantic import ValidationError

from salon_booking.application.exceptions import BackendError, MissingRpcError
from salon_booking.application.dto.supabase_rows import ProfileRow
from salon_booking.application.ports.profile_repository import ProfileRepositoryPort
from salon_booking.domain.entities.profile import AuthUser, Role, UserProfile
from salon_booking.infrastructure.supabase.rest_client import SupabaseClient, eq


class SupabaseProfileRepository(ProfileRepositoryPort):
    def __init__(self, client: SupabaseClient) -> None:
        self._client = client
        self._logger = logging.getLogger(__name__)

    def get_role(self, user_id: str) -> Role:
        rows = self._client.select("profiles", {"id": eq(user_id)}, columns="role", limit=1)
        return Role.normalize(rows[0].get("role") if rows else None)

    def get_profile(self, user: AuthUser) -> UserProfile:
        rows = self._client.select("profiles", {"id": eq(user.id)}, limit=1)
        if not rows:
            return UserProfile(id=user.id, email=user.email)
        profile = self._parse(rows[0])
        if not profile.email and user.email:
            return UserProfile(
                id=profile.id,
                email=user.email,
                full_name=profile.full_name,
                phone=profile.phone,
                address=profile.address,
                avatar_url=profile.avatar_url,
                role=profile.role,
            )
        return profile

    def save_profile(self, profile: UserProfile) -> UserProfile:
        # role changes only go through set_role_by_email
        row = self._client.upsert(
            "profiles",
            {
                "id": profile.id,
                "full_name": profile.full_name,
                "phone": profile.phone,
                "address": profile.address,
                "avatar_url": profile.avatar_url,
            },
        )
        if row is None:
            raise BackendError("Backend returned no profile")
        saved = self._parse(row)
        return UserProfile(
            id=saved.id,
            email=saved.email or profile.email,
            full_name=saved.full_name,
            phone=saved.phone,
            address=saved.address,
            avatar_url=saved.avatar_url,
            role=saved.role,
        )

    def set_role_by_email(self, email: str, role: Role, actor: AuthUser) -> None:
        self._client.rpc(
            "admin_set_user_role_by_email",
            {"p_email": email, "p_role": role.value},
            access_token=actor.access_token,
        )

    def list_users_with_roles(self, limit: int, actor: AuthUser) -> list[UserProfile]:
        try:
            data = self._client.rpc(
                "admin_list_users_with_roles",
                {"p_limit": limit},
                access_token=actor.access_token,
            )
        except MissingRpcError:
            self._logger.warning("admin_list_users_with_roles missing, reading profiles table")
            data = self._client.select("profiles", order="full_name.asc", limit=limit)
        return [self._parse(r) for r in (data or []) if isinstance(r, dict)]

    @staticmethod
    def _parse(row: dict) -> UserProfile:
        try:
            return ProfileRow.model_validate(row).to_entity()
        except ValidationError as e:
            raise BackendError(f"Malformed profile row: {e.errors()[0].get('msg')}") from e
