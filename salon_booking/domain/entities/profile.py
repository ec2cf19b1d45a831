from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    customer = "customer"
    staff = "staff"
    admin = "admin"

    @staticmethod
    def normalize(value: "str | Role | None") -> "Role":
        if isinstance(value, Role):
            return value
        if value in ("staff", "admin"):
            return Role(value)
        return Role.customer

    @property
    def is_staff(self) -> bool:
        return self in (Role.staff, Role.admin)


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str | None = None
    access_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user: AuthUser
    refresh_token: str | None = field(default=None, repr=False)
    expires_in: int | None = None


@dataclass(frozen=True)
class UserProfile:
    id: str
    email: str | None = None
    full_name: str = ""
    phone: str = ""
    address: str = ""
    avatar_url: str = ""
    role: Role = Role.customer
